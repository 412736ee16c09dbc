# Copyright (c) 2025.
# This file is part of dynamic-values, released under the MIT License.
"""
Exceptions raised by :class:`~dynamic_values.nonlinear.dynamic_values.DynamicValues`.

Every failure of a registry operation is reported with one of the classes
below; all derive from :class:`DynamicValuesError` and from the closest
built-in exception, so ``except KeyError`` around a lookup keeps working.
"""

from __future__ import annotations

from typing import Optional

from .types import Symbol


def _type_name(t: Optional[type]) -> str:
    if t is None:
        return "None"
    return getattr(t, "__qualname__", getattr(t, "__name__", repr(t)))


class DynamicValuesError(Exception):
    """Base class for registry errors."""


class DynamicValuesKeyAlreadyExists(DynamicValuesError, KeyError):
    """Raised by ``insert`` when the key is already bound."""

    def __init__(self, key: Symbol) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return (
            f'Attempting to add a key-value pair with key "{self.key}", '
            "key already exists."
        )


class DynamicValuesKeyDoesNotExist(DynamicValuesError, KeyError):
    """Raised when ``at``, ``update`` or ``erase`` is given an absent key."""

    def __init__(self, operation: str, key: Symbol) -> None:
        super().__init__(operation, key)
        self.operation = operation
        self.key = key

    def __str__(self) -> str:
        return (
            f'Attempting to {self.operation} the key "{self.key}", '
            "which does not exist in the Values."
        )


class DynamicValuesIncorrectType(DynamicValuesError, TypeError):
    """Raised when the stored value's type is not the requested one."""

    def __init__(self, key: Symbol, stored_type: type, requested_type: type) -> None:
        super().__init__(key, stored_type, requested_type)
        self.key = key
        self.stored_type = stored_type
        self.requested_type = requested_type

    def __str__(self) -> str:
        return (
            f'Attempting to retrieve value with key "{self.key}", type stored in '
            f"Values is {_type_name(self.stored_type)} but requested type was "
            f"{_type_name(self.requested_type)}"
        )


class DynamicValuesMismatched(DynamicValuesError, ValueError):
    """Raised by ``local_coordinates`` when the two registries do not line up."""

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        msg = (
            "The Values 'this' and the argument passed to "
            "DynamicValues.local_coordinates have mismatched keys and values"
        )
        if self.detail:
            msg = f"{msg}: {self.detail}"
        return msg
