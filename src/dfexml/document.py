# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

from lxml import etree

__all__ = 'dump', 'parse'


# noinspection PyProtectedMember
type ETreeElement = etree._Element  # noqa: SLF001


def parse(data: str | bytes) -> ETreeElement:
    """
    Parse a fiscal document and return its root element.

    Entities are not expanded and no network access is made while parsing,
    as documents usually come from untrusted sources. Whitespace between
    elements is dropped, so that pretty printed and compact documents parse
    to the same tree.
    """
    if isinstance(data, str):
        data = data.encode('utf-8')  # lxml refuses str input that has an encoding declaration
    parser = etree.XMLParser(remove_blank_text=True, resolve_entities=False, no_network=True)
    return etree.fromstring(data, parser=parser)


def dump(element: ETreeElement, *, pretty_print: bool = False, xml_declaration: bool = True, encoding: str = 'UTF-8') -> bytes:
    return etree.tostring(element, pretty_print=pretty_print, xml_declaration=xml_declaration, encoding=encoding)
