# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from operator import attrgetter
from typing import assert_never

from dfexml.classification import Classification, classify_field
from dfexml.codec import PrimitiveCodec
from dfexml.datamodel import Occurrence
from dfexml.exceptions import FieldMappingError, MappingError, ObjectMappingError, PathFrame
from dfexml.model import Attribute, DFeObject, Dictionary, FieldDescriptor
from dfexml.options import SerializerOptions

from . import collection, dictionary, polymorphic, primitive
from .nodes import ETreeElement, Node, find_child, local_name, make_element
from .polymorphic import TypeRegistry

__all__ = ('ObjectSerializer',)


logger = logging.getLogger(__name__)


class ObjectSerializer:
    """
    Maps DFeObject instances to XML elements and back.

    The serializer walks the field table of a type in its declared order
    (stably sorted by the order of each field), hands every field to the
    mapper for its classification and assembles the nodes they return under
    a new element. Errors are re-raised as FieldMappingError at every field
    they cross and as ObjectMappingError at every object, with the path from
    the top level object down to the failing field.
    """

    options: SerializerOptions
    codec: PrimitiveCodec
    registry: TypeRegistry | None

    def __init__(self, options: SerializerOptions | None = None, codec: PrimitiveCodec | None = None, registry: TypeRegistry | None = None) -> None:
        self.options = options if options is not None else SerializerOptions()
        self.codec = codec if codec is not None else PrimitiveCodec()
        self.registry = registry

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}(options={self.options!r}, codec={self.codec!r}, registry={self.registry!r})'

    def resolve_type(self, name: str) -> type[DFeObject] | None:
        if self.registry is None:
            logger.debug('Cannot resolve %r without a type registry', name)
            return None
        return self.registry.resolve(name)

    # Serialization

    def serialize_object(self, value: DFeObject, data_type: type[DFeObject], name: str, namespace: str | None) -> ETreeElement:
        try:
            if not isinstance(value, data_type):
                raise TypeError(f'expected a {data_type.__qualname__} instance, got {type(value).__qualname__}')
            fields = sorted((field for field in data_type._fields_.values() if not field.ignore and value.should_serialize(field)), key=attrgetter('order'))
            nodes = [node for field in fields for node in self.serialize_field(field, value, namespace)]
            return make_element(name, namespace, nodes)
        except MappingError as exc:
            raise ObjectMappingError(exc.message, type_name=data_type.__name__, instance_repr=repr(value), path=exc.path) from exc
        except Exception as exc:
            raise ObjectMappingError(f'Cannot serialize {data_type.__qualname__} object: {exc}', type_name=data_type.__name__, instance_repr=repr(value)) from exc

    def serialize_field(self, field: FieldDescriptor, instance: DFeObject, namespace: str | None) -> list[Node]:
        """Serialize one field of the instance into the nodes that go under the instance element"""
        frame = _frame(field)
        try:
            return self._serialize_field(field, getattr(instance, frame.field_name), namespace)
        except MappingError as exc:
            if isinstance(exc, FieldMappingError) and not exc.path:
                exc.path = (frame,)
                raise
            raise FieldMappingError(exc.message, type_name=frame.type_name, field_name=frame.field_name, path=(frame, *exc.path)) from exc
        except Exception as exc:
            raise FieldMappingError(f'Cannot serialize {frame}: {exc}', type_name=frame.type_name, field_name=frame.field_name, path=(frame,)) from exc

    def _serialize_field(self, field: FieldDescriptor, value: object, namespace: str | None) -> list[Node]:
        classification = self._classify(field)
        match classification:
            case Classification.PRIMITIVE:
                return primitive.serialize(self, field, value, namespace)
            case Classification.LIST | Classification.ARRAY | Classification.ENUMERABLE:
                return collection.serialize(self, field, value, namespace)
            case Classification.DICTIONARY:
                assert isinstance(field, Dictionary)  # noqa: S101 (used by type checkers)
                return dictionary.serialize(self, field, value, namespace)
            case Classification.INTERFACE | Classification.ABSTRACT:
                return [] if value is None else [polymorphic.serialize_value(self, value, field.namespace or namespace)]
            case Classification.CLASS:
                if value is None:
                    if field.occurrence is Occurrence.REQUIRED:
                        raise ValueError(f'the required {field.tag_name!r} element is missing')
                    return []
                return [self.serialize_object(value, field.type, field.tag_name, field.namespace or namespace)]  # type: ignore[arg-type]
            case Classification.ROOT:
                return [] if value is None else [polymorphic.serialize_root(self, field, value, field.namespace or namespace)]  # type: ignore[arg-type]
            case _:
                assert_never(classification)

    # Deserialization

    def deserialize_object[T: DFeObject](self, data_type: type[T], element: ETreeElement | None) -> T:
        try:
            instance = data_type.create()
            if element is None:
                return instance
            claimed: set[ETreeElement] = set()
            for field in sorted((field for field in data_type._fields_.values() if not field.ignore), key=attrgetter('order')):
                setattr(instance, field.name, self.deserialize_field(field, element, claimed))  # type: ignore[arg-type]
            return instance
        except MappingError as exc:
            raise ObjectMappingError(exc.message, type_name=data_type.__name__, path=exc.path) from exc
        except Exception as exc:
            source = 'nothing' if element is None else repr(local_name(element))
            raise ObjectMappingError(f'Cannot deserialize {data_type.__qualname__} object from {source}: {exc}', type_name=data_type.__name__) from exc

    def deserialize_field(self, field: FieldDescriptor, parent: ETreeElement, claimed: set[ETreeElement] | None = None) -> object:
        """
        Read the value of a field from the element of the object that owns it.

        The claimed set holds the child elements that the interface and root
        typed fields of the same object have already consumed, which the next
        such fields skip. It is updated in place.
        """
        frame = _frame(field)
        try:
            return self._deserialize_field(field, parent, claimed if claimed is not None else set())
        except MappingError as exc:
            if isinstance(exc, FieldMappingError) and not exc.path:
                exc.path = (frame,)
                raise
            raise FieldMappingError(exc.message, type_name=frame.type_name, field_name=frame.field_name, path=(frame, *exc.path)) from exc
        except Exception as exc:
            raise FieldMappingError(f'Cannot deserialize {frame}: {exc}', type_name=frame.type_name, field_name=frame.field_name, path=(frame,)) from exc

    def _deserialize_field(self, field: FieldDescriptor, parent: ETreeElement, claimed: set[ETreeElement]) -> object:
        classification = self._classify(field)
        match classification:
            case Classification.PRIMITIVE:
                return primitive.deserialize(self, field, parent)
            case Classification.LIST | Classification.ARRAY | Classification.ENUMERABLE:
                return collection.deserialize(self, field, parent, classification, claimed)
            case Classification.DICTIONARY:
                assert isinstance(field, Dictionary)  # noqa: S101 (used by type checkers)
                return dictionary.deserialize(self, field, parent)
            case Classification.INTERFACE | Classification.ABSTRACT:
                return polymorphic.deserialize_interface(self, field, parent, claimed)
            case Classification.CLASS:
                element = find_child(parent, field.tag_name)
                return None if element is None else self.deserialize_object(field.type, element)
            case Classification.ROOT:
                return polymorphic.deserialize_root(self, field, parent, claimed)
            case _:
                assert_never(classification)

    @staticmethod
    def _classify(field: FieldDescriptor) -> Classification:
        classification = classify_field(field)
        frame = _frame(field)
        if isinstance(field, Attribute) and classification is not Classification.PRIMITIVE:
            raise FieldMappingError(f'The {frame} attribute must have a primitive type, not {classification.name.lower()}', type_name=frame.type_name, field_name=frame.field_name)
        if classification is Classification.DICTIONARY and not isinstance(field, Dictionary):
            raise FieldMappingError(f'The {frame} field has a mapping type but no wrapper metadata (declare it with Dictionary)', type_name=frame.type_name, field_name=frame.field_name)
        return classification


def _frame(field: FieldDescriptor) -> PathFrame:
    assert field.owner is not None and field.name is not None  # noqa: S101 (used by type checkers)
    return PathFrame(field.owner.__name__, field.name)
