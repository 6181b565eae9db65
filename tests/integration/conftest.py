import pytest

from backpropnet.log_init import reset_logger


@pytest.fixture(autouse=True)
def _detach_cli_log_handlers():
    yield
    reset_logger()
