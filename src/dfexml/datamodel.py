# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from collections.abc import MutableMapping
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum, StrEnum
from typing import ClassVar, Protocol, Self, runtime_checkable

__all__ = (  # noqa: RUF022
    # Field metadata

    'FieldKind',
    'Occurrence',
    'infer_kind',
    'kind_default',

    # Protocols and the adapter registry

    'DataConverter',
    'DataAdapter',
    'AdapterRegistry',

    # Adapters

    'StringAdapter',
    'IntegerAdapter',
    'BooleanAdapter',
    'DecimalAdapter',
    'Decimal2Adapter',
    'Decimal3Adapter',
    'Decimal4Adapter',
    'Decimal6Adapter',
    'Decimal10Adapter',
    'DateAdapter',
    'CompactDateAdapter',
    'TimeAdapter',
    'CompactTimeAdapter',
    'DatetimeAdapter',
    'CompactDatetimeAdapter',
    'ZonedDatetimeAdapter',
    'kind_adapters',
)


class FieldKind(StrEnum):
    """The leaf kinds a fiscal document field can have"""

    STR = 'Str'
    INT = 'Int'
    DEC2 = 'De2'
    DEC3 = 'De3'
    DEC4 = 'De4'
    DEC6 = 'De6'
    DEC10 = 'De10'
    BOOL = 'Bool'
    DAT = 'Dat'
    DAT_CFE = 'DatCFe'
    HOR = 'Hor'
    HOR_CFE = 'HorCFe'
    DAT_HOR = 'DatHor'
    DAT_HOR_TZ = 'DatHorTz'
    DAT_HOR_CFE = 'DatHorCFe'
    ENUM = 'Enum'
    CUSTOM = 'Custom'


class Occurrence(Enum):
    REQUIRED = 'Obrigatoria'
    OPTIONAL_IF_NULL = 'NaoObrigatoria'
    REQUIRED_IF_NON_ZERO = 'MaiorQueZero'

    def __repr__(self) -> str:
        return f'{self.__class__.__qualname__}.{self.name}'


@runtime_checkable
class DataConverter(Protocol):
    """A protocol that describes how a data type converts between itself and XML"""

    @classmethod
    def xml_parse(cls, value: str) -> Self:
        """Parse XML into the data type"""
        ...

    def xml_build(self: Self) -> str:
        """Build XML from the data type"""
        ...


@runtime_checkable
class DataAdapter[T](Protocol):
    """A protocol that describes an external adapter between a data type T and XML"""

    @staticmethod
    def xml_parse(value: str, /) -> T:
        """Parse XML into the data type"""
        ...

    @staticmethod
    def xml_build(value: T, /) -> str:
        """Build XML from the data type"""
        ...


type DataAdapterType[T] = type[DataAdapter[T]]


class AdapterRegistry[T]:
    """Adapters for types that are mapped with the CUSTOM field kind"""

    _adapters: ClassVar[MutableMapping[type, type[DataAdapter]]] = {}

    @classmethod
    def associate(cls, data_type: type[T], adapter: type[DataAdapter[T]]) -> None:
        if issubclass(data_type, DataConverter):
            raise TypeError('Adapters for types that already support the DataConverter protocol must be explicitly provided with the field descriptors.')
        cls._adapters[data_type] = adapter

    @classmethod
    def get_adapter(cls, data_type: type[T]) -> type[DataAdapter[T]] | None:
        return cls._adapters.get(data_type, None)


class StringAdapter:
    @staticmethod
    def xml_parse(value: str) -> str:
        return value

    @staticmethod
    def xml_build(value: str) -> str:
        return str(value)


class IntegerAdapter:
    @staticmethod
    def xml_parse(value: str) -> int:
        return int(value)

    @staticmethod
    def xml_build(value: int) -> str:
        if isinstance(value, bool) or not isinstance(value, int | Decimal):
            raise TypeError(f'expected an integer, got {type(value).__qualname__}')
        if value != int(value):
            raise ValueError(f'invalid value {value!r} for integer')
        return str(int(value))


class BooleanAdapter:
    @staticmethod
    def xml_parse(value: str) -> bool:
        match value.strip():
            case 'true' | '1':
                return True
            case 'false' | '0':
                return False
            case _:
                raise ValueError(f'Invalid boolean value: {value!r}')

    @staticmethod
    def xml_build(value: bool) -> str:  # noqa: FBT001
        return '1' if value else '0'


class DecimalAdapter:
    places: ClassVar[int] = 2

    def __init_subclass__(cls, *, places: int | None = None, **kw: object) -> None:
        super().__init_subclass__(**kw)
        if places is not None:
            if places < 0:
                raise ValueError('places must be a non-negative integer')
            cls.places = places

    @classmethod
    def xml_parse(cls, value: str) -> Decimal:
        number = Decimal(value.strip())
        if not number.is_finite():
            raise ValueError(f'invalid decimal value {value!r}')
        return number

    @classmethod
    def xml_build(cls, value: Decimal) -> str:
        if isinstance(value, bool) or not isinstance(value, Decimal | int):
            raise TypeError(f'expected a decimal number, got {type(value).__qualname__}')
        return f'{Decimal(value):.{cls.places}f}'


class Decimal2Adapter(DecimalAdapter, places=2):
    pass


class Decimal3Adapter(DecimalAdapter, places=3):
    pass


class Decimal4Adapter(DecimalAdapter, places=4):
    pass


class Decimal6Adapter(DecimalAdapter, places=6):
    pass


class Decimal10Adapter(DecimalAdapter, places=10):
    pass


class DateAdapter:
    format: ClassVar[str] = '%Y-%m-%d'

    def __init_subclass__(cls, *, format: str | None = None, **kw: object) -> None:  # noqa: A002
        super().__init_subclass__(**kw)
        if format is not None:
            cls.format = format

    @classmethod
    def xml_parse(cls, value: str) -> date:
        return datetime.strptime(value.strip(), cls.format).date()  # noqa: DTZ007

    @classmethod
    def xml_build(cls, value: date) -> str:
        return value.strftime(cls.format)


class CompactDateAdapter(DateAdapter, format='%Y%m%d'):
    pass


class TimeAdapter:
    format: ClassVar[str] = '%H:%M:%S'

    def __init_subclass__(cls, *, format: str | None = None, **kw: object) -> None:  # noqa: A002
        super().__init_subclass__(**kw)
        if format is not None:
            cls.format = format

    @classmethod
    def xml_parse(cls, value: str) -> time:
        return datetime.strptime(value.strip(), cls.format).time()  # noqa: DTZ007

    @classmethod
    def xml_build(cls, value: time) -> str:
        return value.strftime(cls.format)


class CompactTimeAdapter(TimeAdapter, format='%H%M%S'):
    pass


class DatetimeAdapter:
    format: ClassVar[str] = '%Y-%m-%dT%H:%M:%S'

    def __init_subclass__(cls, *, format: str | None = None, **kw: object) -> None:  # noqa: A002
        super().__init_subclass__(**kw)
        if format is not None:
            cls.format = format

    @classmethod
    def xml_parse(cls, value: str) -> datetime:
        return datetime.strptime(value.strip(), cls.format)  # noqa: DTZ007

    @classmethod
    def xml_build(cls, value: datetime) -> str:
        return value.strftime(cls.format)


class CompactDatetimeAdapter(DatetimeAdapter, format='%Y%m%d%H%M%S'):
    pass


class ZonedDatetimeAdapter:
    @staticmethod
    def xml_parse(value: str) -> datetime:
        result = datetime.fromisoformat(value.strip())
        if result.tzinfo is None:
            raise ValueError(f'missing UTC offset in {value!r}')
        return result

    @staticmethod
    def xml_build(value: datetime) -> str:
        if value.tzinfo is None:
            raise ValueError('a timezone aware datetime is required')
        return value.isoformat(timespec='seconds')


kind_adapters: dict[FieldKind, type[DataAdapter]] = {
    FieldKind.STR: StringAdapter,
    FieldKind.INT: IntegerAdapter,
    FieldKind.DEC2: Decimal2Adapter,
    FieldKind.DEC3: Decimal3Adapter,
    FieldKind.DEC4: Decimal4Adapter,
    FieldKind.DEC6: Decimal6Adapter,
    FieldKind.DEC10: Decimal10Adapter,
    FieldKind.BOOL: BooleanAdapter,
    FieldKind.DAT: DateAdapter,
    FieldKind.DAT_CFE: CompactDateAdapter,
    FieldKind.HOR: TimeAdapter,
    FieldKind.HOR_CFE: CompactTimeAdapter,
    FieldKind.DAT_HOR: DatetimeAdapter,
    FieldKind.DAT_HOR_TZ: ZonedDatetimeAdapter,
    FieldKind.DAT_HOR_CFE: CompactDatetimeAdapter,
}


def infer_kind(data_type: object, adapter: DataAdapterType | None = None) -> FieldKind:
    """Return the field kind implied by a declared python type"""
    if adapter is not None or not isinstance(data_type, type):
        return FieldKind.CUSTOM
    # the order matters, bool is an int, datetime is a date and IntEnum/StrEnum are both enums and int/str
    if issubclass(data_type, Enum):
        return FieldKind.ENUM
    if issubclass(data_type, DataConverter) or AdapterRegistry.get_adapter(data_type) is not None:
        return FieldKind.CUSTOM
    if issubclass(data_type, bool):
        return FieldKind.BOOL
    if issubclass(data_type, int):
        return FieldKind.INT
    if issubclass(data_type, Decimal):
        return FieldKind.DEC2
    if issubclass(data_type, datetime):
        return FieldKind.DAT_HOR
    if issubclass(data_type, date):
        return FieldKind.DAT
    if issubclass(data_type, time):
        return FieldKind.HOR
    return FieldKind.STR


def kind_default(kind: FieldKind) -> object:
    """The value of a field of the given kind when its node is missing"""
    match kind:
        case FieldKind.INT:
            return 0
        case FieldKind.DEC2 | FieldKind.DEC3 | FieldKind.DEC4 | FieldKind.DEC6 | FieldKind.DEC10:
            return Decimal(0)
        case FieldKind.BOOL:
            return False
        case _:
            return None
