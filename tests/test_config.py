import pydantic
import pytest

from mediatracker.config import Settings
from mediatracker.log import setup_logging


def test_log_format_is_validated():
    with pytest.raises(pydantic.ValidationError):
        Settings(log_format="xml")


@pytest.mark.parametrize("log_format", ["console", "json"])
def test_setup_logging_accepts_each_format(log_format):
    setup_logging(Settings(log_format=log_format, log_level="warning"))
