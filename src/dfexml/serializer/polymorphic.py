# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from collections.abc import Iterable, Iterator
from typing import Any

from dfexml.model import DFeObject, FieldDescriptor

from .nodes import ETreeElement, ObjectMapper, child_elements, find_children, local_name

__all__ = 'TypeRegistry', 'deserialize_interface', 'deserialize_root', 'is_compatible', 'resolve_element', 'serialize_root', 'serialize_value'


logger = logging.getLogger(__name__)


class TypeRegistry:
    """
    Maps root tag names to the concrete types they stand for.

    The registry is what makes interface and abstract typed fields work when
    deserializing, as the element name is the only thing that identifies the
    concrete type. Types are registered under their root names by default:

      registry = TypeRegistry()

      @registry.register
      class PisAliq(DFeObject, PisTax, root='PISAliq'):
          ...
    """

    def __init__(self, types: Iterable[type[DFeObject]] = ()) -> None:
        self._types: dict[str, type[DFeObject]] = {}
        for data_type in types:
            self.register(data_type)

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}({sorted(self._types)!r})'

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def __iter__(self) -> Iterator[str]:
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def register[T: DFeObject](self, data_type: type[T], *names: str) -> type[T]:
        if not (isinstance(data_type, type) and issubclass(data_type, DFeObject)):
            raise TypeError(f'can only register DFeObject subclasses, not {data_type!r}')
        for name in names or data_type.root_names():
            registered = self._types.setdefault(name, data_type)
            if registered is not data_type:
                raise ValueError(f'the {name!r} tag name is already registered for {registered.__qualname__}')
        return data_type

    def resolve(self, name: str) -> type[DFeObject] | None:
        return self._types.get(name)

    def names(self) -> tuple[str, ...]:
        return tuple(self._types)


def is_compatible(concrete: type, declared: Any) -> bool:  # noqa: ANN401
    """Tell if a concrete type can be the value of a field declared with the given type"""
    if declared is object or declared in concrete.__mro__:
        return True
    return isinstance(declared, type) and not declared.__dict__.get('_is_protocol', False) and issubclass(concrete, declared)


def serialize_value(mapper: ObjectMapper, value: object, namespace: str | None) -> ETreeElement:
    """Serialize the value of an interface typed field under the root tag of its concrete type"""
    if not isinstance(value, DFeObject):
        raise TypeError(f'expected a DFeObject instance, got {type(value).__qualname__}')
    data_type = type(value)
    return mapper.serialize_object(value, data_type, value.root_name(), data_type._root_namespace_ or namespace)


def resolve_element(mapper: ObjectMapper, declared: Any, element: ETreeElement) -> type[DFeObject] | None:  # noqa: ANN401
    concrete = mapper.resolve_type(local_name(element))
    if concrete is not None and is_compatible(concrete, declared):
        return concrete
    return None


def deserialize_interface(mapper: ObjectMapper, field: FieldDescriptor, parent: ETreeElement, claimed: set[ETreeElement]) -> DFeObject | None:
    """Deserialize the first unclaimed child element whose name resolves to a type compatible with the field type"""
    for element in child_elements(parent):
        if element in claimed:
            continue
        concrete = resolve_element(mapper, field.type, element)
        if concrete is not None:
            claimed.add(element)
            logger.debug('Resolved %r to %s for the %s field', local_name(element), concrete.__qualname__, field.name)
            return mapper.deserialize_object(concrete, element)
    logger.debug('No child of %r resolves to a type compatible with the %s field', local_name(parent), field.name)
    return None


def serialize_root(mapper: ObjectMapper, field: FieldDescriptor, value: DFeObject, namespace: str | None) -> ETreeElement:
    data_type = field.type
    if not isinstance(value, data_type):
        raise TypeError(f'expected a {data_type.__qualname__} instance, got {type(value).__qualname__}')
    return mapper.serialize_object(value, data_type, value.root_name(), data_type._root_namespace_ or namespace)


def deserialize_root(mapper: ObjectMapper, field: FieldDescriptor, parent: ETreeElement, claimed: set[ETreeElement]) -> DFeObject | None:
    data_type: type[DFeObject] = field.type
    element = next((element for element in find_children(parent, data_type.root_names()) if element not in claimed), None)
    if element is None:
        return None
    claimed.add(element)
    return mapper.deserialize_object(data_type, element)
