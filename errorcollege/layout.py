"""
Layout reformatter for serialized notation.

Re-indents the one-line output of render() into a readable multi-line text:
a newline after every opening bracket and comma, a dedented newline before every
closing bracket, and a space after colons. String literals delimited by ", ' or `
are copied untouched, escapes included.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from dataclasses import dataclass, replace
from typing import Any

# Local ----------------------------------------------------------------------------------------------------------------
from .utils import fmt_type

QUOTES = frozenset("\"'`")
OPENERS = frozenset("{[")
CLOSERS = frozenset("}]")
DIGITS = frozenset("0123456789")


# Classes --------------------------------------------------------------------------------------------------------------

@dataclass(frozen=True)
class FormatOptions:
    """Layout options of reformat() and the record formatter.

    Attributes:
        indent: Number of spaces per level, or a literal indent string such as "\\t".
        newline: Literal line break token, e.g. "\\n" or "\\r\\n".
        colon_space: Insert a space after colons outside string literals.
    """

    indent: int | str = 2
    newline: str = "\n"
    colon_space: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.indent, bool) or not isinstance(self.indent, (int, str)):
            raise TypeError(f"FormatOptions.indent must be int or str, got {fmt_type(self.indent)}")
        if not isinstance(self.newline, str):
            raise TypeError(f"FormatOptions.newline must be str, got {fmt_type(self.newline)}")
        if not isinstance(self.colon_space, bool):
            raise TypeError(f"FormatOptions.colon_space must be bool, got {fmt_type(self.colon_space)}")

    @property
    def indent_unit(self) -> str:
        """Literal string written once per indent level."""
        if isinstance(self.indent, int):
            return " " * max(0, self.indent)
        return self.indent

    def merge(self, **changes: Any) -> "FormatOptions":
        """Return a copy with the given fields replaced, None values are ignored.

        Examples:
            >>> FormatOptions().merge(indent=4, newline=None)
            FormatOptions(indent=4, newline='\\n', colon_space=True)
        """
        changes = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **changes)


# Methods --------------------------------------------------------------------------------------------------------------


def reformat(raw: str, options: FormatOptions | None = None, **overrides: Any) -> str:
    """Re-indent serialized notation, leaving string literals intact.

    Single left-to-right pass without backtracking. More closing brackets than
    opening ones never fail, the indent level is clamped at zero.

    Args:
        raw: Text produced by render() or the record formatter.
        options: Layout options, defaults to FormatOptions().
        **overrides: Per-call replacements of options fields, e.g. indent=4.

    Returns:
        The reformatted text.

    Examples:
        >>> print(reformat("{a:1,b:[1,2]}"))
        {
          a: 1,
          b: [
            1,
            2
          ]
        }

        >>> reformat('["a,b"]', indent=0, newline=" ")
        '[ "a,b" ]'
    """
    opts = (options or FormatOptions()).merge(**overrides)
    unit = opts.indent_unit
    newline_token = opts.newline

    out: list[str] = []
    indent = 0
    quote: str | None = None
    escaped = False

    i = 0
    n = len(raw)
    while i < n:
        ch = raw[i]

        # Inside a literal everything is copied verbatim
        if quote is not None:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == quote:
                quote = None
            i += 1
            continue

        if ch in QUOTES:
            quote = ch
            out.append(ch)
        elif ch in OPENERS:
            out.append(ch)
            indent += 1
            out.append(newline_token + unit * indent)
        elif ch in CLOSERS:
            indent = max(0, indent - 1)
            _rstrip_blanks(out)
            out.append(newline_token + unit * indent)
            out.append(ch)
        elif ch == ",":
            out.append(ch)
            out.append(newline_token + unit * indent)
        elif ch == ":" and opts.colon_space and not _between_digits(raw, i):
            out.append(": ")
            # Skip spaces already present after the colon
            while i + 1 < n and raw[i + 1] == " ":
                i += 1
        else:
            out.append(ch)
        i += 1

    return "".join(out)


# Private Methods ------------------------------------------------------------------------------------------------------


def _between_digits(raw: str, i: int) -> bool:
    """True for colons inside numeric tokens such as 12:30:00."""
    return 0 < i < len(raw) - 1 and raw[i - 1] in DIGITS and raw[i + 1] in DIGITS


def _rstrip_blanks(out: list[str]) -> None:
    """Strip trailing spaces and tabs from the text written so far."""
    while out:
        stripped = out[-1].rstrip(" \t")
        if stripped:
            out[-1] = stripped
            return
        out.pop()
