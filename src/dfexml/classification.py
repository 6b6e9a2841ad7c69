# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from abc import ABC
from collections.abc import Iterable, Mapping, MutableSequence
from enum import Enum
from functools import cache
from inspect import isabstract
from typing import Any, get_origin

from .model import DFeObject, FieldDescriptor

__all__ = 'Classification', 'classify', 'classify_field'


class Classification(Enum):
    PRIMITIVE = 'primitive'
    LIST = 'list'
    ARRAY = 'array'
    ENUMERABLE = 'enumerable'
    DICTIONARY = 'dictionary'
    INTERFACE = 'interface'
    ABSTRACT = 'abstract'
    CLASS = 'class'
    ROOT = 'root'

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'


@cache
def classify(data_type: Any) -> Classification:  # noqa: ANN401
    """
    Classify a declared field type by its shape.

    When a type has more than one shape the first one that matches wins:
    dictionary, sequence (list, array, other iterables), interface and
    abstract types, concrete classes, document roots and finally primitives.
    Strings and byte strings are always primitives. The result only depends
    on the type, never on a field value.
    """
    origin = get_origin(data_type) or data_type
    if not isinstance(origin, type):
        return Classification.PRIMITIVE
    if issubclass(origin, str | bytes | bytearray):
        return Classification.PRIMITIVE
    if issubclass(origin, Mapping):
        return Classification.DICTIONARY
    if issubclass(origin, MutableSequence):
        return Classification.LIST
    if issubclass(origin, tuple):
        return Classification.ARRAY
    if issubclass(origin, Iterable) and not issubclass(origin, DFeObject | Enum):
        return Classification.ENUMERABLE
    if issubclass(origin, DFeObject):
        if _is_abstract(origin):
            return Classification.ABSTRACT
        return Classification.ROOT if origin._document_ else Classification.CLASS
    if _is_abstract(origin) or origin.__dict__.get('_is_protocol', False):
        return Classification.INTERFACE
    return Classification.PRIMITIVE


def _is_abstract(data_type: type) -> bool:
    return isabstract(data_type) or ABC in data_type.__bases__


def classify_field(field: FieldDescriptor) -> Classification:
    """
    Classify a field by its declared type.

    A document root type on a field that has an explicit element name is
    mapped like any other nested object, under that name.
    """
    classification = classify(field.type)
    if classification is Classification.ROOT and field.xml_name:
        return Classification.CLASS
    return classification

