# cryptoadapter Test Configuration
# This file contains test settings and fixtures

import pytest
import sys
import os

# Add python-core to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'python-core'))

from cryptoadapter.config import reset_config
from cryptoadapter.groups import find_group


def pytest_addoption(parser):
    parser.addoption(
        "--run-slow", action="store_true", default=False,
        help="run tests that generate Diffie-Hellman parameters"
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="needs --run-slow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture(scope="session")
def project_root():
    """Return the project root directory."""
    return os.path.dirname(os.path.dirname(__file__))


@pytest.fixture(scope="session")
def cli_path(project_root):
    """Return path to the CLI entry point."""
    return os.path.join(project_root, 'python-cli', 'main.py')


@pytest.fixture(scope="session")
def modp14_prime():
    """The RFC 3526 2048-bit MODP prime as an integer."""
    prime, _ = find_group("modp14")
    return prime


@pytest.fixture(scope="session")
def modp14_prime_bytes(modp14_prime):
    """The RFC 3526 2048-bit MODP prime as big-endian bytes."""
    return modp14_prime.to_bytes(256, "big")


@pytest.fixture
def clean_config():
    """Drop any configuration a test installs."""
    reset_config()
    yield
    reset_config()


@pytest.fixture
def sample_data(tmp_path):
    """Provide sample data for testing."""
    data_file = tmp_path / "sample.txt"
    data_file.write_text("Hello, World! This is test data for cryptoadapter hashing.")
    return data_file
