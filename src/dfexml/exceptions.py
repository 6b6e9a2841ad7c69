# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from typing import NamedTuple

__all__ = 'PathFrame', 'MappingError', 'FieldMappingError', 'ObjectMappingError', 'ShapeMismatchError'


class PathFrame(NamedTuple):
    type_name: str
    field_name: str

    def __str__(self) -> str:
        return f'{self.type_name}.{self.field_name}'


class MappingError(Exception):
    """
    Base class for the errors raised while mapping objects to and from XML.

    The path lists the fields that lead from the top level object to the
    failing field, outermost first. Each level of the object graph that an
    error crosses adds its own frame and re-raises a new error that has the
    previous one as its cause, so the original error is always reachable
    through the cause chain (see root_cause).
    """

    message: str
    path: tuple[PathFrame, ...]

    def __init__(self, message: str, *, path: tuple[PathFrame, ...] = ()) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if not self.path:
            return self.message
        return f'{self.message} (at {' -> '.join(map(str, self.path))})'

    @property
    def location(self) -> PathFrame | None:
        """The innermost field where the error occurred"""
        return self.path[-1] if self.path else None

    @property
    def root_cause(self) -> BaseException:
        """The original error that started the chain"""
        error: BaseException = self
        while error.__cause__ is not None:
            error = error.__cause__
        return error


class FieldMappingError(MappingError):
    """
    Raised when a field cannot be mapped, either by itself or because of one of its nested fields.

    An error that a field mapper raises about its own field has an empty path,
    which the object engine sets to the frame of that field.
    """

    def __init__(self, message: str, *, type_name: str, field_name: str, path: tuple[PathFrame, ...] = ()) -> None:
        super().__init__(message, path=path)
        self.type_name = type_name
        self.field_name = field_name


class ShapeMismatchError(FieldMappingError):
    """Raised while deserializing when the node of a required field is missing"""


class ObjectMappingError(MappingError):
    """Raised when any of the fields of an object cannot be mapped"""

    def __init__(self, message: str, *, type_name: str, instance_repr: str | None = None, path: tuple[PathFrame, ...] = ()) -> None:
        super().__init__(message, path=path)
        self.type_name = type_name
        self.instance_repr = instance_repr
