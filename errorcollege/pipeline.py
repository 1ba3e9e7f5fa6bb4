"""
ErrorCollege capture pipeline.

Runs captured errors through an ordered chain of transforms, snapshots the survivors
into ErrorRecord objects and hands them to a caller supplied sink.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import warnings

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Literal

# Local ----------------------------------------------------------------------------------------------------------------
from .records import ErrorRecord, current_stack, make_record
from .sentinels import DROP, UNCHANGED, DropType, UnchangedType
from .utils import fmt_type

OnSinkError = Literal["raise", "warn", "skip"]


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class Continue:
    """Transform result replacing both the error and the meta."""

    error: Any
    meta: Any = None


TransformResult = Continue | DropType | UnchangedType
Transform = Callable[[Any, Any], TransformResult]


class ErrorPipeline:
    """
    Transform chain in front of a record sink.

    Each transform is called as `transform(error, meta)` and returns one of:
        - Continue(error, meta): replace the pair seen by the following transforms
        - UNCHANGED: pass the pair on as is
        - DROP: discard the capture, the following transforms are not called

    Args:
        sink: Callable receiving every finished ErrorRecord, e.g. `records.append`.
        transforms: Initial transforms, run in order.
        on_error: Optional callback `on_error(pipeline, error, meta)` invoked after the sink.
        on_sink_error: Sink failure handling - "raise" propagates, "warn" emits
            a RuntimeWarning, "skip" ignores it.

    Examples:
        >>> records = []
        >>> pipeline = ErrorPipeline(records.append)
        >>> pipeline.use(lambda error, meta: Continue(error, {"from": "doctest"}))  # doctest: +ELLIPSIS
        <ErrorPipeline ...>
        >>> pipeline.add(ValueError("bad")).meta
        '{from:"doctest"}'
    """

    def __init__(
        self,
        sink: Callable[[ErrorRecord], Any],
        transforms: Iterable[Transform] = (),
        on_error: Callable[["ErrorPipeline", Any, Any], Any] | None = None,
        on_sink_error: OnSinkError = "raise",
    ) -> None:
        if not callable(sink):
            raise TypeError(f"sink must be callable, got {fmt_type(sink)}")
        if on_error is not None and not callable(on_error):
            raise TypeError(f"on_error must be callable or None, got {fmt_type(on_error)}")
        if on_sink_error not in ("raise", "warn", "skip"):
            raise ValueError(f"on_sink_error must be 'raise', 'warn' or 'skip', got {on_sink_error!r}")

        self._sink = sink
        self._on_error = on_error
        self._on_sink_error = on_sink_error
        self._transforms: list[Transform] = []
        for transform in transforms:
            self.use(transform)

    def __repr__(self) -> str:
        return f"<ErrorPipeline transforms={len(self._transforms)}>"

    @property
    def transforms(self) -> tuple[Transform, ...]:
        return tuple(self._transforms)

    def use(self, transform: Transform) -> "ErrorPipeline":
        """Append a transform, returns the pipeline for chaining."""
        if not callable(transform):
            raise TypeError(f"transform must be callable, got {fmt_type(transform)}")
        self._transforms.append(transform)
        return self

    def add(self, error: Any, meta: Any = None, stack: Any = None) -> ErrorRecord | None:
        """Capture an error.

        Args:
            error: Any object describing the error.
            meta: Optional metadata.
            stack: Stack text, the caller's call stack when None.

        Returns:
            The record handed to the sink, or None if a transform dropped the capture.

        Raises:
            TypeError: If a transform returns anything but Continue, UNCHANGED or DROP.
        """
        for transform in self._transforms:
            result = transform(error, meta)
            if result is DROP:
                return None
            if result is UNCHANGED:
                continue
            if isinstance(result, Continue):
                error, meta = result.error, result.meta
                continue
            raise TypeError(
                f"transform must return Continue, UNCHANGED or DROP, got {fmt_type(result)}"
            )

        if stack is None:
            stack = current_stack(skip=1)
        record = make_record(error, meta, stack)

        try:
            self._sink(record)
        except Exception as e:
            if self._on_sink_error == "raise":
                raise
            if self._on_sink_error == "warn":
                warnings.warn(
                    f"Failed to store error record: {type(e).__name__}: {e}",
                    RuntimeWarning,
                    stacklevel=2,
                )

        if self._on_error is not None:
            self._on_error(self, error, meta)
        return record
