# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from abc import ABC
from collections.abc import Callable, Iterable, Mapping
from dataclasses import KW_ONLY, dataclass
from dataclasses import replace as dataclass_replace
from enum import Enum
from inspect import Parameter, Signature, isabstract
from types import NoneType, UnionType
from typing import Any, ClassVar, Self, Union, dataclass_transform, get_args, get_origin, overload

from .datamodel import DataAdapterType, FieldKind, Occurrence, infer_kind, kind_default

__all__ = (  # noqa: RUF022
    'FieldDescriptor',
    'Element',
    'Attribute',
    'Dictionary',
    'DictionaryKey',
    'DictionaryValue',
    'Ignore',
    'DFeObject',
)


class Marker(Enum):
    NoDefault = 'No default value is provided'

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'


def item_type(data_type: Any) -> Any:  # noqa: ANN401
    """The type of the items of a sequence type (object when not specified)"""
    arguments = [argument for argument in get_args(data_type) if argument is not Ellipsis]
    return arguments[0] if arguments else object


def entry_types(data_type: Any) -> tuple[Any, Any]:  # noqa: ANN401
    """The key and value types of a mapping type (str when not specified)"""
    arguments = get_args(data_type)
    return (arguments[0], arguments[1]) if len(arguments) == 2 else (str, str)  # noqa: PLR2004


def leaf_type(data_type: Any) -> Any:  # noqa: ANN401
    """The type that carries the text of a field (the item type for sequences)"""
    origin = get_origin(data_type)
    if origin is None:
        return data_type
    if isinstance(origin, type) and issubclass(origin, Mapping):
        return entry_types(data_type)[1]
    return item_type(data_type)


def unwrap_optional(data_type: Any) -> Any:  # noqa: ANN401
    """Return T for T | None (and Optional[T]), or the type unchanged"""
    if get_origin(data_type) in {Union, UnionType}:
        arguments = [argument for argument in get_args(data_type) if argument is not NoneType]
        if len(arguments) == 1:
            return arguments[0]
    return data_type


def container_default(data_type: Any) -> object:
    """A new empty container for sequence and mapping types, Marker.NoDefault for other types"""
    origin = get_origin(data_type) or data_type
    if not isinstance(origin, type):
        return Marker.NoDefault
    if issubclass(origin, Mapping):
        return {} if isabstract(origin) else origin()
    if issubclass(origin, str | bytes | bytearray | Enum) or not issubclass(origin, Iterable):
        return Marker.NoDefault
    if isabstract(origin):
        return []
    return origin()


class FieldDescriptor[T](ABC):
    """
    The metadata that controls how a field is mapped to XML.

    The descriptor also stores the field value on the instance. A field that
    was never assigned reads as its default value, which is either the
    explicitly provided default, a new empty container for sequence and
    mapping fields, or the default of the field kind (zero for numbers,
    False for booleans and None for everything else).
    """

    name: str | None
    owner: type['DFeObject'] | None
    type: Any

    xml_name: str
    namespace: str | None
    kind: FieldKind
    adapter: DataAdapterType | None

    min_length: int
    max_length: int
    occurrence: Occurrence
    order: int

    id: str
    description: str

    ignore: ClassVar[bool] = False

    def __init__(
        self,
        data_type: Any,
        /,
        name: str | None = None,
        *,
        kind: FieldKind | None = None,
        namespace: str | None = None,
        adapter: DataAdapterType | None = None,
        min_length: int = 0,
        max_length: int = 0,
        occurrence: Occurrence = Occurrence.REQUIRED,
        order: int = 0,
        default: T | Marker = Marker.NoDefault,
        id: str = '',  # noqa: A002
        description: str = '',
    ) -> None:
        if min_length < 0 or max_length < 0:
            raise ValueError('the min_length and max_length must be non-negative integers')
        if max_length and min_length > max_length:
            raise ValueError(f'min_length ({min_length}) cannot be larger than max_length ({max_length})')
        self.name = None
        self.owner = None
        self.type = data_type = unwrap_optional(data_type)
        self.xml_name = name or ''
        self.namespace = namespace
        self.adapter = adapter
        self.kind = kind if kind is not None else infer_kind(leaf_type(data_type), adapter)
        self.min_length = min_length
        self.max_length = max_length
        self.occurrence = occurrence
        self.order = order
        self.default = default
        self.id = id
        self.description = description

    def __repr__(self) -> str:
        name = self.xml_name or None
        return f'{self.__class__.__name__}({_type_name(self.type)}, {name=}, kind={self.kind!s}, occurrence={self.occurrence!r}, order={self.order})'

    def __set_name__(self, owner: type['DFeObject'], name: str) -> None:
        if not issubclass(owner, DFeObject):  # static type analysis does not catch this
            raise TypeError(f'Can only use {self.__class__.__qualname__} descriptors on DFeObject classes')
        if self.name is None:
            self.name = name
            self.owner = owner
        elif name != self.name:
            raise TypeError(f'cannot assign the same {self.__class__.__name__} descriptor to two different names: {self.name} and {name}')

    @overload
    def __get__(self, instance: None, owner: type['DFeObject']) -> Self: ...

    @overload
    def __get__(self, instance: 'DFeObject', owner: type['DFeObject'] | None = None) -> T: ...

    def __get__(self, instance: 'DFeObject | None', owner: type['DFeObject'] | None = None) -> Self | T:
        if instance is None:
            return self
        assert self.name is not None  # noqa: S101 (used by type checkers)
        try:
            return instance.__dict__[self.name]
        except KeyError:
            # containers are stored on first access, so that changing them in place is not lost
            return instance.__dict__.setdefault(self.name, self.default_value())

    def __set__(self, instance: 'DFeObject', value: T) -> None:
        assert self.name is not None  # noqa: S101 (used by type checkers)
        instance.__dict__[self.name] = value

    def __delete__(self, instance: 'DFeObject') -> None:
        assert self.name is not None  # noqa: S101 (used by type checkers)
        instance.__dict__.pop(self.name, None)

    @property
    def tag_name(self) -> str:
        """The explicit XML name or, in its absence, the field name"""
        return self.xml_name or self.name or ''

    @property
    def signature_parameter(self) -> Parameter:
        assert self.name is not None  # noqa: S101 (used by type checkers)
        default = None if self.default is Marker.NoDefault else self.default
        return Parameter(name=self.name, kind=Parameter.KEYWORD_ONLY, annotation=self.type, default=default)

    def default_value(self) -> T:
        if self.default is not Marker.NoDefault:
            return self.default  # type: ignore[return-value]
        value = container_default(self.type)
        if value is Marker.NoDefault:
            value = kind_default(self.kind)
        return value  # type: ignore[return-value]


class Element[T](FieldDescriptor[T]):
    """
    A field mapped to a child element.

    The declared type decides the shape: primitives become leaf elements,
    DFeObject subclasses become nested elements, sequences repeat the tag
    once per item and interface types are resolved from the value's own
    root tag. Document root types declared without a name are emitted under
    their root tag, otherwise the name wins.
    """


class Attribute[T](FieldDescriptor[T]):
    """A field mapped to an attribute of the owning element"""


@dataclass(frozen=True)
class DictionaryEntrySpec:
    name: str
    _: KW_ONLY
    kind: FieldKind | None = None
    namespace: str | None = None
    adapter: DataAdapterType | None = None
    min_length: int = 0
    max_length: int = 0
    type: Any = None

    @property
    def tag_name(self) -> str:
        return self.name

    def bind(self, data_type: Any) -> Self:  # noqa: ANN401
        return dataclass_replace(self, type=data_type, kind=self.kind if self.kind is not None else infer_kind(data_type, self.adapter))


@dataclass(frozen=True)
class DictionaryKey(DictionaryEntrySpec):
    """The key of a dictionary entry, mapped to an attribute of the entry element unless as_attribute is false"""

    _: KW_ONLY
    as_attribute: bool = True


@dataclass(frozen=True)
class DictionaryValue(DictionaryEntrySpec):
    """The value of a dictionary entry, mapped to a child element of the entry element"""


class Dictionary[T: Mapping](FieldDescriptor[T]):
    """
    A mapping field.

    It is mapped to a wrapper element named after the field, that contains
    one item_name element per entry. The entry key is an attribute of the
    item element (or a child element if as_attribute is false) and the entry
    value is a child element of the item element.
    """

    item_name: str
    key: DictionaryKey
    value: DictionaryValue

    def __init__(
        self,
        data_type: Any,
        /,
        name: str,
        *,
        item_name: str,
        key: DictionaryKey,
        value: DictionaryValue,
        namespace: str | None = None,
        occurrence: Occurrence = Occurrence.REQUIRED,
        order: int = 0,
        id: str = '',  # noqa: A002
        description: str = '',
    ) -> None:
        origin = get_origin(data_type) or data_type
        if not (isinstance(origin, type) and issubclass(origin, Mapping)):
            raise TypeError(f'the type of a Dictionary field must be a mapping, not {_type_name(data_type)}')
        if not name or not item_name:
            raise ValueError('a Dictionary field must specify both its name and item_name')
        super().__init__(data_type, name, namespace=namespace, occurrence=occurrence, order=order, id=id, description=description)
        key_type, value_type = entry_types(data_type)
        self.item_name = item_name
        self.key = key.bind(key_type)
        self.value = value.bind(value_type)

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({_type_name(self.type)}, name={self.xml_name!r}, item_name={self.item_name!r}, key={self.key.name!r}, value={self.value.name!r})'


class Ignore[T](FieldDescriptor[T]):
    """A field that is stored on the object but never mapped to XML"""

    ignore: ClassVar[bool] = True

    def __init__(self, data_type: Any, /, *, default: T | Marker = Marker.NoDefault) -> None:
        super().__init__(data_type, default=default)


def _type_name(data_type: Any) -> str:
    return data_type.__qualname__ if isinstance(data_type, type) else repr(data_type)


@dataclass_transform(kw_only_default=True, field_specifiers=(Element, Attribute, Dictionary, Ignore))
class DFeObject:
    """
    Base class for the objects that are mapped to fiscal document XML.

    Type level metadata is provided with class parameters:

      class PisAliq(DFeObject, PisTax, root='PISAliq'):
          cst: Element[str] = Element(str, 'CST', min_length=2, max_length=2, order=1)
          ...

    root             the root tag name used when the type is a document root
                     or is the value of an interface typed field
    namespace        the namespace of the root tag
    alternate_names  other root tag names the type is known under
    document         marks the type as a document root (implied by root)
    factory          a callable that creates new instances when deserializing

    The field table is collected once when the class is created, inherited
    fields first followed by the fields defined by the class itself in their
    declaration order.
    """

    _root_name_: ClassVar[str | None] = None
    _root_namespace_: ClassVar[str | None] = None
    _alternate_root_names_: ClassVar[tuple[str, ...]] = ()
    _document_: ClassVar[bool] = False
    _factory_: ClassVar[Callable[[], 'DFeObject'] | None] = None

    _fields_: ClassVar[dict[str, FieldDescriptor]] = {}

    __signature__: ClassVar[Signature] = Signature()

    def __init_subclass__(
        cls,
        root: str | None = None,
        namespace: str | None = None,
        alternate_names: Iterable[str] | None = None,
        document: bool | None = None,
        factory: Callable[[], 'DFeObject'] | None = None,
        **kw: object,
    ) -> None:
        super().__init_subclass__(**kw)

        if root is not None:
            cls._root_name_ = root
            cls._document_ = True
        if namespace is not None:
            cls._root_namespace_ = namespace
        if alternate_names is not None:
            cls._alternate_root_names_ = tuple(alternate_names)
        if document is not None:
            cls._document_ = document
        if factory is not None:
            cls._factory_ = staticmethod(factory)  # type: ignore[assignment]

        cls._fields_ = cls._fields_ | {name: value for name, value in cls.__dict__.items() if isinstance(value, FieldDescriptor)}
        cls.__signature__ = Signature(parameters=[descriptor.signature_parameter for descriptor in cls._fields_.values()])

    def __init__(self, **kw: object) -> None:
        for name, value in kw.items():
            if name not in self._fields_:
                raise TypeError(f'{self.__class__.__qualname__} got an unexpected keyword argument {name!r}')
            setattr(self, name, value)

    def __repr__(self) -> str:
        fields = ', '.join(f'{name}={getattr(self, name)!r}' for name in self._fields_)
        return f'{self.__class__.__qualname__}({fields})'

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return all(getattr(self, name) == getattr(other, name) for name, field in self._fields_.items() if not field.ignore)

    __hash__ = None  # type: ignore[assignment]

    @classmethod
    def create(cls) -> Self:
        """Create a new instance using the type's factory if it has one, else the default constructor"""
        factory = cls.__dict__.get('_factory_', None)
        instance = factory() if factory is not None else cls()
        if not isinstance(instance, cls):
            raise TypeError(f'the factory for {cls.__qualname__} returned an instance of {type(instance).__qualname__}')
        return instance

    @classmethod
    def root_names(cls) -> tuple[str, ...]:
        """The root tag names to look for when deserializing this type"""
        if cls._root_name_:
            return cls._root_name_, cls.__name__
        return *cls._alternate_root_names_, cls.__name__

    def root_name(self) -> str:
        """The root tag name for this instance (subclasses may compute it from the instance values)"""
        return self._root_name_ or self.__class__.__name__

    def should_serialize(self, field: FieldDescriptor) -> bool:  # noqa: ARG002
        """Decide if a field of this instance is written when serializing"""
        return True
