# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
import unicodedata
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Protocol, cast

from .datamodel import AdapterRegistry, DataAdapter, DataAdapterType, DataConverter, DecimalAdapter, FieldKind, kind_adapters, kind_default
from .model import leaf_type
from .options import SerializerOptions

__all__ = 'LeafSpec', 'PrimitiveCodec'


logger = logging.getLogger(__name__)


class LeafSpec(Protocol):
    """The part of a field descriptor the codec needs to format a leaf value"""

    type: Any
    kind: FieldKind | None
    adapter: DataAdapterType | None
    min_length: int
    max_length: int

    @property
    def tag_name(self) -> str: ...


class PrimitiveCodec:
    """
    Converts leaf values to and from their text representation.

    The codec only deals with text. Deciding whether a field is a leaf, and
    which element or attribute carries its text, is up to the serializer.
    """

    def to_text(self, value: object, spec: LeafSpec, options: SerializerOptions) -> str:
        if value is None:
            return ''
        kind = spec.kind or FieldKind.STR
        match kind:
            case FieldKind.STR:
                text = self._prepare_string(str(value), options)
            case FieldKind.ENUM:
                if not isinstance(value, Enum):
                    raise TypeError(f'expected an enum member, got {type(value).__qualname__}')
                text = str(value.value)
            case FieldKind.CUSTOM:
                text = self._custom_adapter(spec).xml_build(value)
            case FieldKind.DEC2 | FieldKind.DEC3 | FieldKind.DEC4 | FieldKind.DEC6 | FieldKind.DEC10:
                adapter = cast(type[DecimalAdapter], kind_adapters[kind])
                if isinstance(value, bool) or not isinstance(value, Decimal | int):
                    raise TypeError(f'expected a decimal number, got {type(value).__qualname__}')
                text = adapter.xml_build(Decimal(value).quantize(Decimal(1).scaleb(-adapter.places), rounding=options.rounding))
            case _:
                text = kind_adapters[kind].xml_build(value)
        if options.check_length:
            self._check_length(text, spec)
        return text

    def from_text(self, text: str | None, spec: LeafSpec, options: SerializerOptions) -> object:
        kind = spec.kind or FieldKind.STR
        if text is None:
            return kind_default(kind)
        if kind is FieldKind.STR:
            return text.strip() if options.trim_strings else text
        if not text.strip():
            return kind_default(kind)
        match kind:
            case FieldKind.ENUM:
                return self._parse_enum(text.strip(), leaf_type(spec.type))
            case FieldKind.CUSTOM:
                return self._custom_adapter(spec).xml_parse(text)
            case _:
                try:
                    return kind_adapters[kind].xml_parse(text)
                except InvalidOperation as exc:
                    raise ValueError(f'invalid decimal value {text!r}') from exc

    def default_for(self, kind: FieldKind | None) -> object:
        return kind_default(kind or FieldKind.STR)

    @staticmethod
    def _prepare_string(text: str, options: SerializerOptions) -> str:
        if options.trim_strings:
            text = text.strip()
        if options.remove_accents:
            text = ''.join(char for char in unicodedata.normalize('NFKD', text) if not unicodedata.combining(char))
        return text

    @staticmethod
    def _parse_enum(text: str, enum_type: Any) -> Enum:  # noqa: ANN401
        if not (isinstance(enum_type, type) and issubclass(enum_type, Enum)):
            raise TypeError(f'the ENUM field kind requires an Enum type, not {enum_type!r}')
        for member in enum_type:
            if str(member.value) == text:
                return member
        raise ValueError(f'invalid value {text!r} for {enum_type.__qualname__}')

    @staticmethod
    def _custom_adapter(spec: LeafSpec) -> type[DataAdapter]:
        if spec.adapter is not None:
            return spec.adapter
        data_type = leaf_type(spec.type)
        if isinstance(data_type, type):
            if issubclass(data_type, DataConverter):
                return cast(type[DataAdapter], data_type)  # A type that implements the DataConverter protocol is its own DataAdapter
            adapter = AdapterRegistry.get_adapter(data_type)
            if adapter is not None:
                return adapter
        raise TypeError(f'there is no adapter for the {spec.tag_name!r} field of type {data_type!r}')

    @staticmethod
    def _check_length(text: str, spec: LeafSpec) -> None:
        length = len(text)
        if spec.min_length and length < spec.min_length:
            logger.warning('The value of %r is shorter than %d characters: %r', spec.tag_name, spec.min_length, text)
        elif spec.max_length and length > spec.max_length:
            logger.warning('The value of %r is longer than %d characters: %r', spec.tag_name, spec.max_length, text)
