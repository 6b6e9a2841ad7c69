# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from lxml import etree

from dfexml.codec import PrimitiveCodec
from dfexml.model import DFeObject
from dfexml.options import SerializerOptions

__all__ = (  # noqa: RUF022
    'ETreeElement',
    'AttributeNode',
    'Node',
    'ObjectMapper',
    'qualified_name',
    'local_name',
    'make_element',
    'child_elements',
    'find_child',
    'find_children',
    'find_attribute',
)


# noinspection PyProtectedMember
type ETreeElement = etree._Element  # noqa: SLF001


@dataclass(frozen=True, slots=True)
class AttributeNode:
    """An attribute produced by a field, waiting to be set on the element that owns the field"""

    tag: str
    value: str


type Node = ETreeElement | AttributeNode


class ObjectMapper(Protocol):
    """The part of the object engine that the field mappers call back into"""

    options: SerializerOptions
    codec: PrimitiveCodec

    def serialize_object(self, value: DFeObject, data_type: type[DFeObject], name: str, namespace: str | None) -> ETreeElement: ...

    def deserialize_object[T: DFeObject](self, data_type: type[T], element: ETreeElement | None) -> T: ...

    def resolve_type(self, name: str) -> type | None: ...


def qualified_name(name: str, namespace: str | None) -> str:
    return f'{{{namespace}}}{name}' if namespace else name


def local_name(element: ETreeElement) -> str:
    return etree.QName(element).localname


def make_element(name: str, namespace: str | None, children: Iterable[Node] = (), text: str | None = None) -> ETreeElement:
    """Create a new element and attach the given nodes to it, in order"""
    element = etree.Element(qualified_name(name, namespace), nsmap={None: namespace} if namespace else None)  # type: ignore[dict-item]  # lxml stubs are a mess
    if text is not None:
        element.text = text
    for node in children:
        if isinstance(node, AttributeNode):
            element.set(node.tag, node.value)
        else:
            element.append(node)
    return element


def child_elements(parent: ETreeElement) -> Iterator[ETreeElement]:
    """Iterate over the child elements, skipping comments and processing instructions"""
    return (child for child in parent if isinstance(child.tag, str))


def find_children(parent: ETreeElement, names: str | Sequence[str]) -> list[ETreeElement]:
    """The child elements with the given local name(s), in document order, regardless of their namespace"""
    names = (names,) if isinstance(names, str) else names
    return [child for child in child_elements(parent) if local_name(child) in names]


def find_child(parent: ETreeElement, names: str | Sequence[str]) -> ETreeElement | None:
    return next(iter(find_children(parent, names)), None)


def find_attribute(parent: ETreeElement, name: str, namespace: str | None = None) -> str | None:
    value: Any = parent.get(qualified_name(name, namespace))
    if value is None and namespace:
        value = parent.get(name)
    return value
