from pathlib import Path
from typing import Set, Tuple

from .types import Options

VERSION: str = "0.0.0-dev"

OPTIONS: Options = [
    (
        (
            "-b",
            "--browser",
        ),
        dict(
            dest="browsers",
            action="append",
            type=str,
            help="Browser to run the features against, as NAME_VERSION (e.g., 'chrome_120'). "
            "May be given multiple times; every feature runs once per browser.",
        ),
    ),
    (
        ("--selenium-grid",),
        dict(
            dest="selenium_grid",
            action="store",
            type=str,
            help="The Selenium Grid address as HOST:PORT (default: 127.0.0.1:4444).",
        ),
    ),
    (
        ("--features-dir",),
        dict(
            dest="features_directory",
            action="store",
            type=Path,
            help="The directory containing the feature files, 'environment.py' and 'steps'.",
        ),
    ),
    (("--config",), dict(dest="config", action="store", type=str, help="Specify the path to a configuration file.")),
]

ENV_PREFIX: str = "bddhooks_"

ENV_SEQUENCE_OPTIONS: Set = {"name", "tags", "format", "outfiles", "userdata_defines", "paths", "browsers"}

ENV_EXCLUDED_OPTIONS: Set = {
    "config",
    "help",
    "tags_help",
    "lang_list",
    "lang_help",
    "verbose",
    "version",
}

USER_CONFIG: str = ".bddhooks"

DEFAULT_FEATURES_PATH = Path("features")

DEFAULT_RUNNER = "bddhooks.bddhooks_behave.runner:BrowserMatrixRunner"

# --- Hooks ---

ORDER_0: int = 0
ORDER_10: int = 10
ORDER_20: int = 20

TAG_CASSANDRA: str = "C*"
TAG_MONGODB: str = "MongoDB"
TAG_ELASTICSEARCH: str = "elasticsearch"
TAG_AEROSPIKE: str = "Aerospike"
TAG_WEB: str = "web"

# --- Selenium ---

# Seconds
PAGE_LOAD_TIMEOUT: int = 120
IMPLICITLY_WAIT: int = 10
SCRIPT_TIMEOUT: int = 30

BROWSER_PROPERTY: str = "browser"
BROWSER_VERSION_SEPARATOR: str = "_"
CHROME_ARGUMENTS: Tuple[str, ...] = ("test-type",)

# --- Connection settings (name, default) ---

CONNECTION_SETTINGS: Tuple[Tuple[str, str], ...] = (
    ("CASSANDRA_HOST", "127.0.0.1"),
    ("CASSANDRA_PORT", "9042"),
    ("MONGO_HOST", "127.0.0.1"),
    ("MONGO_PORT", "27017"),
    ("ES_NODE", "127.0.0.1"),
    ("ES_PORT", "9200"),
    ("AEROSPIKE_HOST", "127.0.0.1"),
    ("AEROSPIKE_PORT", "3000"),
    ("SELENIUM_GRID", "127.0.0.1:4444"),
)

# Milliseconds
MONGO_SERVER_SELECTION_TIMEOUT: int = 5000
