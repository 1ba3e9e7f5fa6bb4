"""
ErrorCollege utilities shared across the package.

Contains functions used by multiple modules to avoid circular imports.
"""

# Standard library -----------------------------------------------------------------------------------------------------
from typing import Any


# Methods --------------------------------------------------------------------------------------------------------------


def class_name(obj: Any, fully_qualified: bool = False) -> str:
    """
    Get the class name of an object or a class.

    Returns class name whether given an instance or the class itself.
    For example, both `class_name(10)` and `class_name(int)` return 'int'.

    Parameters:
        obj (Any): An object or a class.
        fully_qualified (bool): If true, returns the fully qualified name for non-builtin classes.

    Returns:
        str: The class name.

    Examples:
        >>> class_name(10)
        'int'

        >>> class C: ...
        >>> class_name(C())
        'C'
    """
    cls = obj if isinstance(obj, type) else type(obj)

    try:
        name = cls.__name__
        module = cls.__module__
    except Exception:
        return "object"

    if fully_qualified and module != "builtins":
        return f"{module}.{name}"
    return name


def safe_str(obj: Any) -> str:
    """
    Defensive str() call - handle broken __str__ and __repr__ methods gracefully.

    Examples:
        >>> safe_str(None)
        'None'

        >>> class Broken:
        ...     def __str__(self):
        ...         raise RuntimeError
        >>> safe_str(Broken())
        '<Broken object (str failed: RuntimeError)>'
    """
    try:
        return str(obj)
    except Exception as e:
        return f"<{class_name(obj)} object (str failed: {type(e).__name__})>"


def fmt_type(obj: Any) -> str:
    """Format type information of an object for exception messages, e.g. '<int>'."""
    return f"<{class_name(obj, fully_qualified=True)}>"
