# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from decimal import Decimal

from dfexml.datamodel import Occurrence
from dfexml.exceptions import ShapeMismatchError
from dfexml.model import Attribute, FieldDescriptor, Marker

from .nodes import AttributeNode, ETreeElement, Node, ObjectMapper, find_attribute, find_child, local_name, make_element, qualified_name

__all__ = 'deserialize', 'is_omitted', 'serialize'


def is_omitted(occurrence: Occurrence, value: object, text: str) -> bool:
    """Tell if a leaf value is left out of the document because of its occurrence rule"""
    match occurrence:
        case Occurrence.REQUIRED:
            return False
        case Occurrence.OPTIONAL_IF_NULL:
            return value is None or text == ''
        case Occurrence.REQUIRED_IF_NON_ZERO:
            return value is None or text == '' or (isinstance(value, int | float | Decimal) and not isinstance(value, bool) and value == 0)


def serialize(mapper: ObjectMapper, field: FieldDescriptor, value: object, namespace: str | None) -> list[Node]:
    text = mapper.codec.to_text(value, field, mapper.options)
    if is_omitted(field.occurrence, value, text):
        return []
    if isinstance(field, Attribute):
        return [AttributeNode(qualified_name(field.tag_name, field.namespace), text)]
    return [make_element(field.tag_name, field.namespace or namespace, text=text)]


def deserialize(mapper: ObjectMapper, field: FieldDescriptor, parent: ETreeElement) -> object:
    text: str | None
    if isinstance(field, Attribute):
        text = find_attribute(parent, field.tag_name, field.namespace)
        node_type = 'attribute'
    else:
        element = find_child(parent, field.tag_name)
        text = None if element is None else element.text or ''
        node_type = 'element'
    if text is not None:
        return mapper.codec.from_text(text, field, mapper.options)
    if field.occurrence is Occurrence.REQUIRED and mapper.options.strict_required:
        assert field.owner is not None and field.name is not None  # noqa: S101 (used by type checkers)
        raise ShapeMismatchError(f'Missing required {node_type} {field.tag_name!r} in {local_name(parent)!r}', type_name=field.owner.__name__, field_name=field.name)
    if field.default is not Marker.NoDefault:
        return field.default
    return mapper.codec.default_for(field.kind)
