from setuptools import find_packages, setup

from src.bddhooks.constants import VERSION

DESCRIPTION = """Tagged scenario hooks for behave (bddhooks)
Opens and closes the connections a scenario asks for through its tags:
@C* (Cassandra), @MongoDB, @elasticsearch, @Aerospike and @web (a remote
browser session on a Selenium Grid), and runs the features once per browser.
"""

setup(
    name="bddhooks",
    version=VERSION,
    packages=find_packages(where="src", exclude=[
                           "__pycache__", "*.__pycache__*"]),
    package_dir={"": "src"},
    include_package_data=True,
    entry_points={
        "console_scripts": [
            "bddhooks=bddhooks.__main__:main",
        ],
    },
    install_requires=[
        "behave<2.0,>=1.3.3",
        "dotenv<1.0,>=0.9.9",
        "selenium<5.0,>=4.11",
        "cassandra-driver<4.0,>=3.29",
        "pymongo<5.0,>=4.6",
        "elasticsearch<9.0,>=8.11",
        "aerospike<18.0,>=15.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.3,<9.0",
            "pytest-mock>=3.14,<4.0",
            "pytest-ordering>=0.6,<1.0",
            "pytest-dependency>=0.6,<1.0",
        ],
    },
    description=DESCRIPTION,
    long_description=DESCRIPTION,
    license="MIT License",
    classifiers=["Programming Language :: Python :: 3.9"],
)
