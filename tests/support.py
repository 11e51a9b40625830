from pathlib import Path


def get_project_root_dir() -> Path:
    return Path(__file__).parents[1].absolute()


def get_mock_suite_features_dir() -> Path:
    return get_project_root_dir() / "mock_suite" / "features"
