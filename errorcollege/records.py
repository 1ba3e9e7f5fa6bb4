"""
ErrorCollege Records

Immutable snapshots of captured errors and the report formatter joining them.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import collections.abc as abc
import datetime as dt
import traceback

from dataclasses import dataclass
from typing import Any, Iterable

# Local ----------------------------------------------------------------------------------------------------------------
from .layout import FormatOptions, reformat
from .serializer import render
from .utils import fmt_type

DIVIDER = "=" * 64


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorRecord:
    """Snapshot of one captured error.

    All fields are text already produced by the serializer.

    Attributes:
        error: Rendered error payload.
        meta: Rendered metadata payload.
        create_time: ISO-8601 creation timestamp.
        stack: Stack text captured when the error was recorded.
    """

    error: str
    meta: str
    create_time: str
    stack: str

    def to_dict(self) -> dict[str, str]:
        """Interchange mapping with the keys error, meta, createTime and stack."""
        return {
            "error": self.error,
            "meta": self.meta,
            "createTime": self.create_time,
            "stack": self.stack,
        }

    @classmethod
    def from_dict(cls, data: abc.Mapping[str, Any]) -> "ErrorRecord":
        """Build a record from an interchange mapping, missing keys become empty strings.

        Raises:
            TypeError: If data is not a mapping.
        """
        if not isinstance(data, abc.Mapping):
            raise TypeError(f"ErrorRecord data must be a mapping, got {fmt_type(data)}")
        create_time = data.get("createTime", data.get("create_time", ""))
        return cls(
            error=str(data.get("error", "")),
            meta=str(data.get("meta", "")),
            create_time=str(create_time),
            stack=str(data.get("stack", "")),
        )


# Methods --------------------------------------------------------------------------------------------------------------


def make_record(error: Any, meta: Any = None, stack: Any = None, *, now: dt.datetime | None = None) -> ErrorRecord:
    """Snapshot an error payload and its metadata into an ErrorRecord.

    Args:
        error: Any object describing the error, rendered with quoted strings.
        meta: Optional metadata, rendered with quoted strings.
        stack: Stack text; when None the current call stack is captured.
            Rendered without quotes.
        now: Creation time, defaults to the current UTC time.

    Examples:
        >>> r = make_record({"a": 1}, "Test meta 1")
        >>> r.error, r.meta
        ('{a:1}', '"Test meta 1"')
    """
    if stack is None:
        stack = current_stack(skip=1)
    return ErrorRecord(
        error=render(error),
        meta=render(meta),
        create_time=_iso_timestamp(now),
        stack=render(stack, quote_strings=False),
    )


def current_stack(skip: int = 0) -> str:
    """Locations of the caller's frames, innermost first, one `at <function> (<file>:<line>)` per line.

    Source lines are left out, so the text holds no quotes, commas or brackets from user code.

    Args:
        skip: Number of innermost caller frames to leave out.
    """
    frames = traceback.extract_stack()[: -(skip + 1)]
    return "\n".join(f"at {frame.name} ({frame.filename}:{frame.lineno})" for frame in reversed(frames))


def format_records(
    records: Iterable[ErrorRecord | abc.Mapping[str, Any]],
    options: FormatOptions | None = None,
    **overrides: Any,
) -> str:
    """Format captured records as a multi-block report.

    Every record becomes a block headed by its 1-based position and creation time,
    followed by its stack, error and meta, and closed by a divider line.
    The joined blocks are passed once through reformat().

    Args:
        records: ErrorRecord objects or interchange mappings, in report order.
        options: Layout options, defaults to FormatOptions().
        **overrides: Per-call replacements of options fields.

    Returns:
        Report text, empty for no records.
    """
    opts = (options or FormatOptions()).merge(**overrides)
    blocks = [_format_block(idx, _as_record(record), opts) for idx, record in enumerate(records, start=1)]
    if not blocks:
        return ""
    return reformat(opts.newline.join(blocks), opts)


def format_one(record: ErrorRecord | abc.Mapping[str, Any], options: FormatOptions | None = None, **overrides: Any) -> str:
    """Format a single record, same as format_records([record])."""
    return format_records([record], options, **overrides)


# Private Methods ------------------------------------------------------------------------------------------------------


def _as_record(record: ErrorRecord | abc.Mapping[str, Any]) -> ErrorRecord:
    if isinstance(record, ErrorRecord):
        return record
    return ErrorRecord.from_dict(record)


def _format_block(idx: int, record: ErrorRecord, opts: FormatOptions) -> str:
    nl = opts.newline
    sp = " " if opts.colon_space else ""
    lines = [
        f"#{idx} {record.create_time}",
        "",
        f"stack:{sp}{record.stack}",
        "",
        f"error:{sp}{record.error}",
        "",
        f"meta:{sp}{record.meta}",
        DIVIDER,
    ]
    return nl.join(lines)


def _iso_timestamp(now: dt.datetime | None = None) -> str:
    """UTC timestamp like 2024-05-01T12:30:00.123Z"""
    now = now or dt.datetime.now(dt.timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return now.isoformat(timespec="milliseconds") + "Z"
