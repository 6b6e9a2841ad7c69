# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Iterable
from inspect import isabstract
from typing import get_origin

from dfexml.classification import Classification, classify
from dfexml.model import FieldDescriptor, item_type

from . import polymorphic
from .nodes import ETreeElement, Node, ObjectMapper, child_elements, find_children, make_element

__all__ = 'deserialize', 'serialize'


def serialize(mapper: ObjectMapper, field: FieldDescriptor, values: object, namespace: str | None) -> list[Node]:
    """
    Serialize a sequence field as one element per item.

    Object and primitive items are written under the field tag, while the
    items of an interface typed sequence are written under their own root
    tags. A missing or empty sequence produces no elements at all.
    """
    if values is None:
        return []
    if isinstance(values, str | bytes | bytearray) or not isinstance(values, Iterable):
        raise TypeError(f'expected a sequence of values, got {type(values).__qualname__}')
    data_type = item_type(field.type)
    namespace = field.namespace or namespace
    classification = classify(data_type)
    nodes: list[Node] = []
    for value in values:
        if value is None:
            continue
        match classification:
            case Classification.PRIMITIVE:
                nodes.append(make_element(field.tag_name, namespace, text=mapper.codec.to_text(value, field, mapper.options)))
            case Classification.CLASS | Classification.ROOT:
                if not isinstance(value, data_type):
                    raise TypeError(f'expected a {data_type.__qualname__} item, got {type(value).__qualname__}')
                nodes.append(mapper.serialize_object(value, data_type, field.tag_name, namespace))
            case Classification.INTERFACE | Classification.ABSTRACT:
                nodes.append(polymorphic.serialize_value(mapper, value, namespace))
            case _:
                raise TypeError(f'sequence items of type {data_type!r} are not supported ({classification.name.lower()})')
    return nodes


def deserialize(mapper: ObjectMapper, field: FieldDescriptor, parent: ETreeElement, classification: Classification, claimed: set[ETreeElement]) -> object:
    """
    Deserialize the items of a sequence field into the declared container type.

    Interface typed items are read from the children whose names resolve to a
    compatible type, skipping the ones other fields of the object claimed.
    """
    data_type = item_type(field.type)
    items: list[object]
    match item_classification := classify(data_type):
        case Classification.PRIMITIVE:
            items = [mapper.codec.from_text(element.text or '', field, mapper.options) for element in find_children(parent, field.tag_name)]
        case Classification.CLASS | Classification.ROOT:
            items = [mapper.deserialize_object(data_type, element) for element in find_children(parent, field.tag_name)]
        case Classification.INTERFACE | Classification.ABSTRACT:
            items = []
            for element in child_elements(parent):
                concrete = None if element in claimed else polymorphic.resolve_element(mapper, data_type, element)
                if concrete is not None:
                    claimed.add(element)
                    items.append(mapper.deserialize_object(concrete, element))
        case _:
            raise TypeError(f'sequence items of type {data_type!r} are not supported ({item_classification.name.lower()})')
    return _make_container(field.type, classification, items)


def _make_container(data_type: object, classification: Classification, items: list[object]) -> object:
    origin = get_origin(data_type) or data_type
    if classification is Classification.ARRAY:
        return tuple(items)
    if not isinstance(origin, type) or origin is list or isabstract(origin):
        return items
    return origin(items)
