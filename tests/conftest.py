#
# Pytest Fixtures
#

# Standard library -----------------------------------------------------------------------------------------------------
import datetime as dt

# Third-party ----------------------------------------------------------------------------------------------------------
import pytest

# Local ----------------------------------------------------------------------------------------------------------------
from errorcollege.records import ErrorRecord

# Fixtures -------------------------------------------------------------------------------------------------------------


@pytest.fixture
def fixed_now() -> dt.datetime:
    """Aware UTC timestamp with milliseconds."""
    return dt.datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=dt.timezone.utc)


@pytest.fixture
def record_factory():
    """Factory of ErrorRecord objects with sensible defaults."""

    def _create_record(
        error: str = "{a:1}",
        meta: str = '"m"',
        create_time: str = "2024-01-02T03:04:05.678Z",
        stack: str = "at main",
    ) -> ErrorRecord:
        return ErrorRecord(error=error, meta=meta, create_time=create_time, stack=stack)

    return _create_record
