# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Mapping
from inspect import isabstract
from typing import get_origin

from dfexml.classification import Classification, classify
from dfexml.datamodel import Occurrence
from dfexml.model import Dictionary, DictionaryValue

from . import polymorphic
from .nodes import AttributeNode, ETreeElement, Node, ObjectMapper, find_attribute, find_child, find_children, make_element, qualified_name

__all__ = 'deserialize', 'serialize'


def serialize(mapper: ObjectMapper, field: Dictionary, value: object, namespace: str | None) -> list[Node]:
    """
    Serialize a mapping field as a wrapper element with one entry element per item.

      <field><item key="A"><value>1</value></item>...</field>

    A missing or empty mapping is left out unless the field is required, in
    which case an empty wrapper element is written. An entry whose value is
    None has no value element and reads back as None.
    """
    if value is not None and not isinstance(value, Mapping):
        raise TypeError(f'expected a mapping, got {type(value).__qualname__}')
    if not value and field.occurrence is not Occurrence.REQUIRED:
        return []
    namespace = field.namespace or namespace
    entries = [_serialize_entry(mapper, field, key, item, namespace) for key, item in (value or {}).items()]
    return [make_element(field.tag_name, namespace, entries)]


def _serialize_entry(mapper: ObjectMapper, field: Dictionary, key: object, value: object, namespace: str | None) -> ETreeElement:
    key_spec = field.key
    key_text = mapper.codec.to_text(key, key_spec, mapper.options)
    children: list[Node] = []
    if key_spec.as_attribute:
        children.append(AttributeNode(qualified_name(key_spec.name, key_spec.namespace), key_text))
    else:
        children.append(make_element(key_spec.name, key_spec.namespace or namespace, text=key_text))
    if value is not None:
        children.append(_serialize_value(mapper, field.value, value, field.value.namespace or namespace))
    return make_element(field.item_name, namespace, children)


def _serialize_value(mapper: ObjectMapper, spec: DictionaryValue, value: object, namespace: str | None) -> ETreeElement:
    match classification := classify(spec.type):
        case Classification.PRIMITIVE:
            return make_element(spec.name, namespace, text=mapper.codec.to_text(value, spec, mapper.options))
        case Classification.CLASS | Classification.ROOT:
            if not isinstance(value, spec.type):
                raise TypeError(f'expected a {spec.type.__qualname__} value, got {type(value).__qualname__}')
            return mapper.serialize_object(value, spec.type, spec.name, namespace)
        case Classification.INTERFACE | Classification.ABSTRACT:
            return make_element(spec.name, namespace, [polymorphic.serialize_value(mapper, value, namespace)])
        case _:
            raise TypeError(f'dictionary values of type {spec.type!r} are not supported ({classification.name.lower()})')


def deserialize(mapper: ObjectMapper, field: Dictionary, parent: ETreeElement) -> object:
    result: dict[object, object] = {}
    wrapper = find_child(parent, field.tag_name)
    if wrapper is not None:
        for entry in find_children(wrapper, field.item_name):
            key = mapper.codec.from_text(_key_text(field, entry), field.key, mapper.options)
            result[key] = _deserialize_value(mapper, field.value, find_child(entry, field.value.name))
    origin = get_origin(field.type) or field.type
    if origin is dict or isabstract(origin):
        return result
    return origin(result)


def _key_text(field: Dictionary, entry: ETreeElement) -> str | None:
    if field.key.as_attribute:
        return find_attribute(entry, field.key.name, field.key.namespace)
    element = find_child(entry, field.key.name)
    return None if element is None else element.text or ''


def _deserialize_value(mapper: ObjectMapper, spec: DictionaryValue, element: ETreeElement | None) -> object:
    if element is None:
        return None
    match classification := classify(spec.type):
        case Classification.PRIMITIVE:
            return mapper.codec.from_text(element.text or '', spec, mapper.options)
        case Classification.CLASS | Classification.ROOT:
            return mapper.deserialize_object(spec.type, element)
        case Classification.INTERFACE | Classification.ABSTRACT:
            for child in element:
                if isinstance(child.tag, str) and (concrete := polymorphic.resolve_element(mapper, spec.type, child)) is not None:
                    return mapper.deserialize_object(concrete, child)
            return None
        case _:
            raise TypeError(f'dictionary values of type {spec.type!r} are not supported ({classification.name.lower()})')
