import os
import tempfile
import pytest # type: ignore

def pytest_configure(config):
    """Add markers to the pytest configuration."""
    config.addinivalue_line("markers", "quick: mark test as quick to run")
    config.addinivalue_line("markers", "full: mark test as part of the full test suite")
    config.addinivalue_line("markers", "slow: mark test as very slow to run")

@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield tmpdirname

@pytest.fixture
def data_dir(temp_dir):
    """Directory for FileStorage sketches inside the temporary directory."""
    return os.path.join(temp_dir, "hll_data")
