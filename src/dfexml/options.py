# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from dataclasses import dataclass, replace
from decimal import ROUND_HALF_UP
from typing import Self

__all__ = 'SerializerOptions',  # noqa: COM818


@dataclass(frozen=True, kw_only=True, slots=True)
class SerializerOptions:
    """
    Formatting hints passed unchanged through every serializer call.

    trim_strings      strip the blanks surrounding string values
    remove_accents    remove diacritics from string values on output
    check_length      log a warning when a value's text falls outside
                      the min/max length declared by its field
    strict_required   raise ShapeMismatchError when a required leaf is
                      absent while deserializing, instead of using the
                      field kind's default value
    rounding          the decimal rounding mode used for fixed places
    """

    trim_strings: bool = True
    remove_accents: bool = False
    check_length: bool = True
    strict_required: bool = True
    rounding: str = ROUND_HALF_UP

    def replace(self, **changes: object) -> Self:
        return replace(self, **changes)  # type: ignore[arg-type]
