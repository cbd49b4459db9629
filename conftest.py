import shutil
from pathlib import Path

import pytest

TEST_DATA_DIR = Path("data-tests")


@pytest.fixture(autouse=True)
def data_dir():
    """Wipe data-tests/ before every test and hand it to the test."""
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    TEST_DATA_DIR.mkdir(parents=True)
    yield TEST_DATA_DIR
    # leave data-tests around after tests for inspection; CI can ignore it
