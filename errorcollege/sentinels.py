"""
Sentinel objects returned by pipeline transforms.

All sentinels use identity checks (using 'is') rather than equality checks.

Sentinels:
    DROP: The record is discarded and the remaining transforms are skipped
    UNCHANGED: The error and meta pass to the next transform as they are

Example:
    >>> def ignore_keyboard_interrupt(error, meta):
    ...     if isinstance(error, KeyboardInterrupt):
    ...         return DROP
    ...     return UNCHANGED
"""

from typing import Any, Final

__all__ = [
    'DROP',
    'UNCHANGED',
    'DropType',
    'UnchangedType',
]


# Base Sentinel --------------------------------------------------------------------------------------------------------

class _SentinelBase:
    """
    Base class for all sentinel objects.

    Sentinels are singleton objects optimized for identity checks.
    They provide clean representations and consistent behavior.
    """
    __slots__ = ('_name',)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        """Returns a clean string representation for debugging."""
        return f'<{self._name}>'

    def __eq__(self, other: Any) -> bool:
        """Ensures identity-based comparison."""
        return self is other

    def __hash__(self) -> int:
        """Returns a hash based on object identity."""
        return id(self)

    def __bool__(self) -> bool:
        """Returns False by default (sentinels are typically falsy)."""
        return False

    def __reduce__(self) -> tuple:
        """Ensures proper behavior during pickling."""
        return (self.__class__, (self._name,))


# Sentinel Types -------------------------------------------------------------------------------------------------------

class DropType(_SentinelBase):
    """
    Sentinel type for DROP.

    Returned by a transform to discard the captured error. No record is produced.
    """
    _instance: 'DropType | None' = None

    def __new__(cls) -> 'DropType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("DROP")

    def __reduce__(self) -> tuple:
        """Ensure pickling returns the singleton instance."""
        return (self.__class__, ())


class UnchangedType(_SentinelBase):
    """
    Sentinel type for UNCHANGED.

    Returned by a transform that leaves the error and meta as they are.
    """
    _instance: 'UnchangedType | None' = None

    def __new__(cls) -> 'UnchangedType':
        """Ensures singleton behavior."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if not hasattr(self, '_name'):
            super().__init__("UNCHANGED")

    def __bool__(self) -> bool:
        """Returns True as UNCHANGED lets the capture proceed."""
        return True

    def __reduce__(self) -> tuple:
        """Ensure pickling returns the singleton instance."""
        return (self.__class__, ())


# Sentinel Objects -----------------------------------------------------------------------------------------------------

DROP: Final[DropType] = DropType()
"""
Sentinel discarding the captured error.

Use with identity check: `if result is DROP:`
"""

UNCHANGED: Final[UnchangedType] = UnchangedType()
"""
Sentinel passing the captured error and meta through a transform untouched.
"""
