"""
Cycle-safe structural serializer for captured errors and their metadata.

Turns an arbitrary, possibly self-referential Python object into a deterministic
one-line textual notation such as `{user:"bob",tags:["a","b"],when:Date(2024-01-01T00:00:00)}`.
The render() function dispatches through the ordered RENDERERS table, first match wins.
Back-edges in the object graph are rendered as `CircularReference(<shallow descriptor>)`.
"""

# Standard library -----------------------------------------------------------------------------------------------------
import array
import collections
import collections.abc as abc
import datetime as dt
import enum
import functools
import inspect
import re
import traceback
import types

from dataclasses import fields, is_dataclass
from typing import Any, Callable, Literal

# Local ----------------------------------------------------------------------------------------------------------------
from .events import ErrorEvent, RejectionEvent
from .utils import class_name, fmt_type, safe_str

PRIMITIVE_TYPES = (
    type(None),
    bool,  # Comes before int (is subclass of int)
    int,
    float,
    complex,
    str,
    type(Ellipsis),  # EllipsisType (...)
    type(NotImplemented),  # NotImplementedType
)

MAX_SAFE_INTEGER = 2**53 - 1

# Classes --------------------------------------------------------------------------------------------------------------

Mode = Literal["deep", "shallow"]


class _RenderCall:
    """
    State of a single deep render: options and the identity set of composites on the current path.
    """
    __slots__ = ("quote_strings", "max_depth", "seen", "depth")

    def __init__(self, quote_strings: bool, max_depth: int | None) -> None:
        self.quote_strings = quote_strings
        self.max_depth = max_depth
        self.seen: set[int] = set()
        self.depth = 0

    def value(self, obj: Any) -> str:
        if not _is_composite(obj):
            return self._dispatch(obj)

        obj_id = id(obj)
        if obj_id in self.seen:
            return f"CircularReference({render_shallow(obj)})"
        if self.max_depth is not None and self.depth >= self.max_depth:
            return render_shallow(obj)

        self.seen.add(obj_id)
        self.depth += 1
        try:
            return self._dispatch(obj)
        finally:
            self.depth -= 1
            self.seen.discard(obj_id)

    def _dispatch(self, obj: Any) -> str:
        try:
            for predicate, renderer in RENDERERS:
                if predicate(obj):
                    return renderer(self, obj)
            return safe_str(obj)
        except Exception as e:
            return f"<{class_name(obj)} object (render failed: {type(e).__name__})>"


# Methods --------------------------------------------------------------------------------------------------------------


def render(
    value: Any,
    mode: Mode = "deep",
    *,
    quote_strings: bool = True,
    max_depth: int | None = None,
) -> str:
    """Render any object as a compact one-line notation.

    Args:
        value: Any Python object, self-referential graphs included.
        mode: "deep" renders recursively, "shallow" returns a one-line descriptor only.
        quote_strings: Wrap strings in double quotes, escaping inner quotes and backslashes.
            Applies to every string found in the object graph.
        max_depth: Maximum nesting of composites rendered in full, None for unlimited.
            Composites below the limit are rendered as their shallow descriptor.

    Returns:
        The textual notation of value. Never raises for any value.

    Raises:
        ValueError: If mode or max_depth are invalid.

    Examples:
        >>> render({"a": 1})
        '{a:1}'

        >>> render("Test meta 1")
        '"Test meta 1"'

        >>> render("Test meta 1", quote_strings=False)
        'Test meta 1'

        >>> d = {"name": "loop"}
        >>> d["self"] = d
        >>> render(d)
        '{name:"loop",self:CircularReference(Object(class:dict keys:name,self))}'

        >>> render([1, 2, 3], "shallow")
        'Array(length:3)'
    """
    if mode not in ("deep", "shallow"):
        raise ValueError(f"mode must be 'deep' or 'shallow', got {mode!r}")
    if max_depth is not None and (isinstance(max_depth, bool) or not isinstance(max_depth, int)):
        raise ValueError(f"max_depth must be int or None, got {fmt_type(max_depth)}")
    if max_depth is not None and max_depth < 0:
        raise ValueError(f"max_depth must be >=0, got {max_depth}")

    if mode == "shallow":
        return render_shallow(value)
    return _RenderCall(quote_strings=quote_strings, max_depth=max_depth).value(value)


def render_shallow(value: Any) -> str:
    """Non-recursive one-line descriptor of a value.

    Sequences render as `Array(length:N)`, other composites as
    `Object(class:<type name> keys:<k1,k2,...>)` listing their own keys.
    Everything else uses str().

    Examples:
        >>> render_shallow({"a": 1, "b": 2})
        'Object(class:dict keys:a,b)'
    """
    try:
        if _is_sequence(value):
            return f"Array(length:{len(value)})"
        if _is_composite(value):
            keys = ",".join(safe_str(k) for k, _ in _own_items(value))
            return f"Object(class:{class_name(value)} keys:{keys})"
    except Exception as e:
        return f"<{class_name(value)} object (render failed: {type(e).__name__})>"
    return safe_str(value)


def looks_like_class(name: str) -> bool:
    """
    Heuristic: callables named with a leading uppercase letter are classes.

    Relies on naming convention only, e.g. a function named `Build` is reported as a class.
    """
    return bool(name) and name[0].isupper()


# Predicates -----------------------------------------------------------------------------------------------------------


def _is_sequence(obj: Any) -> bool:
    return isinstance(obj, abc.Sequence) and not isinstance(
        obj, (str, bytes, bytearray, memoryview, array.array, collections.UserString)
    )


def _is_date(obj: Any) -> bool:
    return isinstance(obj, (dt.date, dt.time))


def _is_pattern(obj: Any) -> bool:
    return isinstance(obj, re.Pattern)


def _is_map(obj: Any) -> bool:
    return isinstance(obj, abc.Mapping) and not isinstance(obj, dict)


def _is_set(obj: Any) -> bool:
    return isinstance(obj, abc.Set)


def _is_byte_buffer(obj: Any) -> bool:
    return isinstance(obj, (bytes, bytearray))


def _is_typed_view(obj: Any) -> bool:
    return isinstance(obj, (memoryview, array.array))


def _is_error(obj: Any) -> bool:
    return isinstance(obj, BaseException)


def _is_error_event(obj: Any) -> bool:
    return isinstance(obj, ErrorEvent)


def _is_rejection_event(obj: Any) -> bool:
    return isinstance(obj, RejectionEvent)


def _is_keyed_record(obj: Any) -> bool:
    if isinstance(obj, dict):
        return True
    if isinstance(obj, PRIMITIVE_TYPES) or _is_callable(obj):
        return False
    if isinstance(obj, (enum.Enum, types.ModuleType)):
        return False
    return is_dataclass(obj) or hasattr(obj, "__dict__")


def _is_text(obj: Any) -> bool:
    return isinstance(obj, str)


def _is_callable(obj: Any) -> bool:
    return isinstance(obj, (type, functools.partial)) or inspect.isroutine(obj)


def _is_big_int(obj: Any) -> bool:
    return isinstance(obj, int) and not isinstance(obj, bool) and abs(obj) > MAX_SAFE_INTEGER


_COMPOSITE_PREDICATES: tuple[Callable[[Any], bool], ...] = (
    _is_sequence,
    _is_date,
    _is_pattern,
    _is_map,
    _is_set,
    _is_byte_buffer,
    _is_typed_view,
    _is_error,
    _is_error_event,
    _is_rejection_event,
    _is_keyed_record,
)


def _is_composite(obj: Any) -> bool:
    """Objects tracked in the identity set, i.e. everything rendered by rules 1-10."""
    try:
        return any(predicate(obj) for predicate in _COMPOSITE_PREDICATES)
    except Exception:
        return False


# Renderers ------------------------------------------------------------------------------------------------------------


def _render_sequence(call: _RenderCall, obj: Any) -> str:
    return "[" + ",".join(call.value(item) for item in obj) + "]"


def _render_date(call: _RenderCall, obj: Any) -> str:
    return f"Date({obj.isoformat()})"


def _render_pattern(call: _RenderCall, obj: re.Pattern) -> str:
    return f"RegExp({safe_str(obj.pattern)})"


def _render_map(call: _RenderCall, obj: abc.Mapping) -> str:
    entries = ",".join(f"{call.value(k)} => {call.value(v)}" for k, v in obj.items())
    return "Map {" + entries + "}"


def _render_set(call: _RenderCall, obj: abc.Set) -> str:
    return "Set {" + ",".join(call.value(item) for item in obj) + "}"


def _render_byte_buffer(call: _RenderCall, obj: bytes | bytearray) -> str:
    return f"ArrayBuffer({len(obj)})"


def _render_typed_view(call: _RenderCall, obj: memoryview | array.array) -> str:
    nbytes = obj.nbytes if isinstance(obj, memoryview) else len(obj) * obj.itemsize
    return f"{class_name(obj)}({nbytes})"


def _render_error(call: _RenderCall, obj: BaseException) -> str:
    parts = [
        f"name:{call.value(class_name(obj))}",
        f"message:{call.value(safe_str(obj))}",
        f"stack:{call.value(_exception_stack(obj))}",
    ]
    if obj.__cause__ is not None:
        parts.append(f"cause:{call.value(obj.__cause__)}")
    # Extra state of custom exception classes
    parts.extend(f"{_key_text(call, k)}:{call.value(v)}" for k, v in _own_items(obj))
    return "Error({" + ",".join(parts) + "})"


def _render_error_event(call: _RenderCall, obj: ErrorEvent) -> str:
    return _render_fields(call, "ErrorEvent", obj, ("type", "message", "filename", "lineno", "colno", "error"))


def _render_rejection_event(call: _RenderCall, obj: RejectionEvent) -> str:
    return _render_fields(call, "RejectionEvent", obj, ("type", "reason"))


def _render_keyed_record(call: _RenderCall, obj: Any) -> str:
    return "{" + ",".join(f"{_key_text(call, k)}:{call.value(v)}" for k, v in _own_items(obj)) + "}"


def _render_text(call: _RenderCall, obj: str) -> str:
    if not call.quote_strings:
        return str(obj)
    escaped = str(obj).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _render_callable(call: _RenderCall, obj: Any) -> str:
    target = obj.func if isinstance(obj, functools.partial) else obj
    name = safe_str(getattr(target, "__name__", ""))
    if looks_like_class(name):
        return f"Class({name})"
    return f"Function({name})"


def _render_big_int(call: _RenderCall, obj: int) -> str:
    return f"{int(obj)}n"


RENDERERS: tuple[tuple[Callable[[Any], bool], Callable[[_RenderCall, Any], str]], ...] = (
    (_is_sequence, _render_sequence),
    (_is_date, _render_date),
    (_is_pattern, _render_pattern),
    (_is_map, _render_map),
    (_is_set, _render_set),
    (_is_byte_buffer, _render_byte_buffer),
    (_is_typed_view, _render_typed_view),
    (_is_error, _render_error),
    (_is_error_event, _render_error_event),
    (_is_rejection_event, _render_rejection_event),
    (_is_keyed_record, _render_keyed_record),
    (_is_text, _render_text),
    (_is_callable, _render_callable),
    (_is_big_int, _render_big_int),
)
"""
Ordered (predicate, renderer) pairs, first match wins; unmatched values fall back to str().
"""


# Private Methods ------------------------------------------------------------------------------------------------------


def _own_items(obj: Any) -> list[tuple[Any, Any]]:
    """Own fields of an object in their enumeration order: mapping items, dataclass fields or public attributes."""
    if isinstance(obj, abc.Mapping):
        return list(obj.items())
    if is_dataclass(obj) and not isinstance(obj, type):
        return [(f.name, getattr(obj, f.name, None)) for f in fields(obj)]
    try:
        attrs = vars(obj)
    except TypeError:
        return []
    return [(k, v) for k, v in attrs.items() if not str(k).startswith("_")]


def _key_text(call: _RenderCall, key: Any) -> str:
    """Keys are written bare, non-string keys are rendered."""
    if isinstance(key, str):
        return key
    return call.value(key)


def _render_fields(call: _RenderCall, label: str, obj: Any, names: tuple[str, ...]) -> str:
    parts = ",".join(f"{name}:{call.value(getattr(obj, name, None))}" for name in names)
    return f"{label}({{{parts}}})"


def _exception_stack(exc: BaseException) -> str:
    """Exception header and traceback frames, without chained exceptions."""
    try:
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__, chain=False))
    except Exception:
        return safe_str(exc)
