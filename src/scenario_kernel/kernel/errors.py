from __future__ import annotations

from typing import get_args


class DeclarationError(ValueError):
    # Raised when a composition declaration is malformed (duplicate orders, bad entries).
    pass


class ConfigurationError(ValueError):
    # Raised at configuration time: unknown child ids, too many explicit args, bad overrides.
    pass


class UnresolvedParameterError(LookupError):
    def __init__(self, parameter: str, expected: object, owner: type) -> None:
        super().__init__(
            f"Constructor parameter '{parameter}' of type {_type_name(expected)} could not be resolved "
            f"for {owner.__name__}. It was not passed explicitly, is not a well-known value "
            "and no registered service provides it."
        )
        self.parameter = parameter
        self.expected = expected
        self.owner = owner


class InvalidStateError(RuntimeError):
    pass


class MissingVariableError(KeyError):
    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        # KeyError repr-quotes its argument; keep the message readable.
        return f"A value for '{self.name}' was not found in the scenario context"


class TypeMismatchError(TypeError):
    def __init__(self, name: str, found: type, expected: object) -> None:
        super().__init__(
            f"The value of '{name}' is not of the expected type. "
            f"Found {found.__name__} but expected {_type_name(expected)}"
        )
        self.name = name
        self.found = found
        self.expected = expected


def _type_name(kind: object) -> str:
    # Unions and parameterized generics read better through their repr.
    if isinstance(kind, type) and not get_args(kind):
        return kind.__name__
    return repr(kind)
