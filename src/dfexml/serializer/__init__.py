# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging

from dfexml import document
from dfexml.codec import PrimitiveCodec
from dfexml.model import DFeObject
from dfexml.options import SerializerOptions

from .engine import ObjectSerializer
from .nodes import ETreeElement
from .polymorphic import TypeRegistry

__all__ = 'ObjectSerializer', 'TypeRegistry', 'deserialize', 'from_string', 'serialize', 'to_string'


logger = logging.getLogger(__name__)


def serialize(
    instance: DFeObject,
    data_type: type[DFeObject] | None = None,
    name: str | None = None,
    namespace: str | None = None,
    *,
    options: SerializerOptions | None = None,
    codec: PrimitiveCodec | None = None,
) -> ETreeElement:
    """
    Serialize an object to an XML element.

    The element name and namespace default to the root tag of the object
    and to the namespace of its type.
    """
    data_type = data_type if data_type is not None else type(instance)
    name = name or instance.root_name()
    namespace = namespace if namespace is not None else data_type._root_namespace_
    logger.debug('Serializing %s as %r', data_type.__qualname__, name)
    return ObjectSerializer(options, codec).serialize_object(instance, data_type, name, namespace)


def deserialize[T: DFeObject](
    data_type: type[T],
    element: ETreeElement | None,
    *,
    options: SerializerOptions | None = None,
    codec: PrimitiveCodec | None = None,
    registry: TypeRegistry | None = None,
) -> T:
    """
    Create an object of the given type from an XML element.

    The registry is needed to resolve the concrete types of interface and
    abstract fields. Without it such fields are left empty.
    """
    logger.debug('Deserializing %s from %r', data_type.__qualname__, None if element is None else element.tag)
    return ObjectSerializer(options, codec, registry).deserialize_object(data_type, element)


def to_string(
    instance: DFeObject,
    *,
    options: SerializerOptions | None = None,
    codec: PrimitiveCodec | None = None,
    pretty_print: bool = False,
    xml_declaration: bool = True,
    encoding: str = 'UTF-8',
) -> bytes:
    element = serialize(instance, options=options, codec=codec)
    return document.dump(element, pretty_print=pretty_print, xml_declaration=xml_declaration, encoding=encoding)


def from_string[T: DFeObject](
    data_type: type[T],
    data: str | bytes,
    *,
    options: SerializerOptions | None = None,
    codec: PrimitiveCodec | None = None,
    registry: TypeRegistry | None = None,
) -> T:
    return deserialize(data_type, document.parse(data), options=options, codec=codec, registry=registry)
