# SPDX-FileCopyrightText: 2020-present Dan Pascu <dan@aethereal.link>
#
# SPDX-License-Identifier: AGPL-3.0-or-later

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from decimal import Decimal

import pytest
from cfe import CFe, Det, Environment, Imposto, InfAdic, Pis, PisAliq, PisNt, PisTax, Prod, make_cfe, registry
from lxml import etree

from dfexml.datamodel import FieldKind, Occurrence
from dfexml.exceptions import FieldMappingError, ObjectMappingError, PathFrame, ShapeMismatchError
from dfexml.model import Attribute, DFeObject, Dictionary, DictionaryKey, DictionaryValue, Element, FieldDescriptor, Ignore
from dfexml.options import SerializerOptions
from dfexml.serializer import ObjectSerializer, TypeRegistry, deserialize, from_string, serialize, to_string


def child_names(element: etree._Element) -> list[str]:
    return [etree.QName(child).localname for child in element]


class TestSerialize:

    def test_document_structure(self) -> None:
        root = serialize(make_cfe())
        assert root.tag == 'CFe'
        assert child_names(root) == ['infCFe']
        inf_cfe = root[0]
        assert inf_cfe.get('versao') == '0.07'
        assert inf_cfe.get('Id') == 'CFe35240611111111111111591234567890001234567890'
        assert child_names(inf_cfe) == ['ide', 'emit', 'det', 'det', 'det', 'infAdic']
        ide = inf_cfe.find('ide')
        assert ide is not None
        assert ide.findtext('dEmi') == '20240614'
        assert ide.findtext('hEmi') == '143005'
        assert ide.findtext('tpAmb') == '2'

    def test_leaf_formatting(self) -> None:
        root = serialize(make_cfe())
        det = root.find('infCFe/det')
        assert det is not None
        assert det.get('nItem') == '1'
        assert det.findtext('prod/qCom') == '2.0000'
        assert det.findtext('prod/vUnCom') == '1.500'
        assert det.findtext('imposto/PIS/PISAliq/pPIS') == '0.0165'
        assert det.findtext('imposto/PIS/PISAliq/vBC') == '3.00'

    def test_field_order(self) -> None:
        class Ordered(DFeObject, root='ordered'):
            c: Element[str] = Element(str, order=20)
            a: Element[str] = Element(str, order=10)
            b: Element[str] = Element(str, order=5)
            d: Element[str] = Element(str, order=10)

        root = serialize(Ordered(a='a', b='b', c='c', d='d'))
        assert child_names(root) == ['b', 'a', 'd', 'c']

    def test_optional_suppression(self) -> None:
        root = serialize(make_cfe())
        first, second, _ = root.findall('infCFe/det')
        assert first.find('infAdProd') is None
        assert first.find('prod/NCM') is not None
        assert second.find('prod/NCM') is None
        assert second.findtext('infAdProd') == 'Produzido no local'

    def test_required_if_non_zero(self) -> None:
        root = serialize(make_cfe())
        first, second, _ = root.findall('infCFe/det')
        assert first.find('prod/vDesc') is None
        assert second.findtext('prod/vDesc') == '1.15'
        assert first.findtext('imposto/PIS/PISAliq/vPIS') == '0.05'

    def test_required_none_is_empty(self) -> None:
        root = serialize(Prod(c_prod='1', cfop='5102', u_com='UN', ind_regra='A'), name='prod')
        x_prod = root.find('xProd')
        assert x_prod is not None
        assert not x_prod.text
        assert root.findtext('qCom') == '0.0000'

    def test_sequence(self) -> None:
        root = serialize(make_cfe())
        items = root.findall('infCFe/det')
        assert [item.get('nItem') for item in items] == ['1', '2', '3']
        assert [item.findtext('prod/cProd') for item in items] == ['0001', '0002', '0003']

    def test_empty_sequence(self) -> None:
        cfe = make_cfe()
        cfe.inf_cfe.det = []
        root = serialize(cfe)
        assert root.find('infCFe/det') is None

    def test_dictionary(self) -> None:
        root = serialize(make_cfe())
        entries = root.findall('infCFe/infAdic/obsFiscoList/obsFisco')
        assert [entry.get('xCampo') for entry in entries] == ['xCampoDeducao', 'xCampoOrigem']
        assert [entry.findtext('xTexto') for entry in entries] == ['Lei 12.741/2012', 'Venda presencial']

    def test_empty_optional_dictionary(self) -> None:
        root = serialize(InfAdic(inf_cpl='text'), name='infAdic')
        assert child_names(root) == ['infCpl']

    def test_polymorphic(self) -> None:
        root = serialize(make_cfe())
        assert [child_names(pis) for pis in root.findall('infCFe/det/imposto/PIS')] == [['PISAliq'], ['PISNT'], ['PISNT']]

    def test_polymorphic_none(self) -> None:
        root = serialize(Pis(), name='PIS')
        assert len(root) == 0

    def test_root_name_from_value(self) -> None:
        class Event(DFeObject, root='evento'):
            kind: Element[str] = Element(str, 'tpEvento')

            def root_name(self) -> str:
                return f'evento{self.kind}'

        assert serialize(Event(kind='Cancelamento')).tag == 'eventoCancelamento'

    def test_should_serialize(self) -> None:
        class Filtered(DFeObject, root='filtered'):
            a: Element[str] = Element(str)
            b: Element[str] = Element(str)

            def should_serialize(self, field: FieldDescriptor) -> bool:
                return field.name != 'b' or self.a == 'with-b'

        assert child_names(serialize(Filtered(a='x', b='y'))) == ['a']
        assert child_names(serialize(Filtered(a='with-b', b='y'))) == ['a', 'b']

    def test_ignored_fields(self) -> None:
        class WithIgnored(DFeObject, root='ignored'):
            a: Element[str] = Element(str)
            cache: Ignore[dict] = Ignore(dict)

        instance = WithIgnored(a='x', cache={'key': 'value'})
        root = serialize(instance)
        assert child_names(root) == ['a']
        assert deserialize(WithIgnored, root).cache == {}

    def test_namespaces(self) -> None:
        namespace = 'http://www.portalfiscal.inf.br/nfe'

        class Child(DFeObject):
            value: Element[int] = Element(int, 'value')

        class Document(DFeObject, root='NFe', namespace=namespace):
            child: Element[Child] = Element(Child, 'child')
            tag: Attribute[str] = Attribute(str, 'tag')

        root = serialize(Document(child=Child(value=3), tag='x'))
        assert root.tag == f'{{{namespace}}}NFe'
        assert root.get('tag') == 'x'
        assert root.findtext(f'{{{namespace}}}child/{{{namespace}}}value') == '3'
        assert root.nsmap == {None: namespace}
        assert etree.tostring(root).count(b'xmlns') == 1
        assert deserialize(Document, root) == Document(child=Child(value=3), tag='x')

    def test_explicit_name_and_namespace(self) -> None:
        root = serialize(Pis(tax=PisNt(cst='04')), name='PIS', namespace='urn:test')
        assert root.tag == '{urn:test}PIS'
        assert root[0].tag == '{urn:test}PISNT'

    def test_root_typed_field(self) -> None:
        class Envelope(DFeObject, root='envelope'):
            document: Element[CFe] = Element(CFe)
            copy: Element[CFe | None] = Element(CFe, 'copy', occurrence=Occurrence.OPTIONAL_IF_NULL)

        envelope = Envelope(document=make_cfe())
        root = serialize(envelope)
        assert child_names(root) == ['CFe']
        assert deserialize(Envelope, root, registry=registry) == envelope

    def test_to_string(self) -> None:
        data = to_string(Pis(tax=PisNt(cst='04')), pretty_print=False)
        assert data.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")
        assert data.endswith(b'<Pis><PISNT><CST>04</CST></PISNT></Pis>')


class TestDeserialize:

    def test_round_trip(self) -> None:
        cfe = make_cfe()
        assert deserialize(CFe, serialize(cfe), registry=registry) == cfe

    def test_round_trip_through_text(self) -> None:
        cfe = make_cfe()
        assert from_string(CFe, to_string(cfe, pretty_print=True), registry=registry) == cfe

    def test_values(self) -> None:
        cfe = deserialize(CFe, serialize(make_cfe()), registry=registry)
        assert cfe.inf_cfe.versao == Decimal('0.07')
        assert cfe.inf_cfe.ide.tp_amb is Environment.TESTING
        assert [item.n_item for item in cfe.inf_cfe.det] == [1, 2, 3]
        assert isinstance(cfe.inf_cfe.det[0].imposto.pis.tax, PisAliq)
        assert isinstance(cfe.inf_cfe.det[1].imposto.pis.tax, PisNt)
        assert cfe.inf_cfe.det[0].prod.v_desc == Decimal(0)
        assert cfe.inf_cfe.det[0].inf_ad_prod is None
        assert cfe.inf_cfe.inf_adic is not None
        assert cfe.inf_cfe.inf_adic.obs_fisco == {'xCampoDeducao': 'Lei 12.741/2012', 'xCampoOrigem': 'Venda presencial'}

    def test_empty_text(self) -> None:
        xml = '<prod><cProd> 1 </cProd><xProd/><CFOP>5102</CFOP><uCom>UN</uCom><qCom/><vUnCom>1.000</vUnCom><indRegra>A</indRegra></prod>'
        prod = from_string(Prod, xml)
        assert prod.c_prod == '1'
        assert prod.x_prod == ''
        assert prod.q_com == Decimal(0)

    def test_missing_nested_object(self) -> None:
        det = from_string(Det, '<det nItem="1"/>')
        assert det.n_item == 1
        assert det.prod is None
        assert det.imposto is None

    def test_none_element(self) -> None:
        prod = deserialize(Prod, None)
        assert prod == Prod()

    def test_missing_required_leaf(self) -> None:
        xml = '<prod><cProd>1</cProd><CFOP>5102</CFOP><uCom>UN</uCom><qCom>1</qCom><vUnCom>1.000</vUnCom><indRegra>A</indRegra></prod>'
        with pytest.raises(ObjectMappingError, match=r"Missing required element 'xProd' in 'prod'") as exc_info:
            from_string(Prod, xml)
        assert exc_info.value.path == (PathFrame('Prod', 'x_prod'),)
        assert isinstance(exc_info.value.__cause__, ShapeMismatchError)

    def test_missing_required_leaf_nested(self) -> None:
        root = serialize(make_cfe())
        v_bc = root.find('infCFe/det/imposto/PIS/PISAliq/vBC')
        assert v_bc is not None
        v_bc.getparent().remove(v_bc)
        with pytest.raises(ObjectMappingError, match=r"Missing required element 'vBC' in 'PISAliq'") as exc_info:
            deserialize(CFe, root, registry=registry)
        assert isinstance(exc_info.value.root_cause, ShapeMismatchError)
        assert exc_info.value.location == PathFrame('PisAliq', 'v_bc')

    def test_missing_required_leaf_lenient(self) -> None:
        xml = '<prod><cProd>1</cProd><CFOP>5102</CFOP><uCom>UN</uCom><vUnCom>1.000</vUnCom><indRegra>A</indRegra></prod>'
        prod = from_string(Prod, xml, options=SerializerOptions(strict_required=False))
        assert prod.x_prod is None
        assert prod.q_com == Decimal(0)

    def test_polymorphic_without_registry(self, caplog: pytest.LogCaptureFixture) -> None:
        root = serialize(Pis(tax=PisNt(cst='04')), name='PIS')
        with caplog.at_level(logging.DEBUG, logger='dfexml'):
            pis = deserialize(Pis, root)
        assert pis.tax is None
        assert 'without a type registry' in caplog.text

    def test_polymorphic_skips_incompatible_types(self) -> None:
        class Unrelated(DFeObject, root='Other'):
            cst: Element[str] = Element(str, 'CST')

        types = TypeRegistry([PisNt, Unrelated])
        pis = from_string(Pis, '<PIS><Other><CST>01</CST></Other><PISNT><CST>04</CST></PISNT></PIS>', registry=types)
        assert pis.tax == PisNt(cst='04')

    def test_alternate_root_names(self) -> None:
        class Summary(DFeObject, alternate_names=['resumo', 'summary'], document=True):
            total: Element[int] = Element(int, 'total')

        class Report(DFeObject, root='report'):
            summary: Element[Summary] = Element(Summary)

        assert from_string(Report, '<report><summary><total>3</total></summary></report>').summary == Summary(total=3)
        assert from_string(Report, '<report><Summary><total>4</total></Summary></report>').summary == Summary(total=4)
        assert from_string(Report, '<report/>').summary is None

    def test_factory(self) -> None:
        created: list[DFeObject] = []

        def make_item() -> 'Item':
            item = Item(note='from factory')
            created.append(item)
            return item

        class Item(DFeObject, root='item', factory=make_item):
            code: Element[str] = Element(str, 'code')
            note: Ignore[str] = Ignore(str)

        item = from_string(Item, '<item><code>7</code></item>')
        assert created == [item]
        assert item.note == 'from factory'
        assert item.code == '7'

    def test_sequence_containers(self) -> None:
        class Containers(DFeObject, root='containers'):
            numbers: Element[tuple[int, ...]] = Element(tuple[int, ...], 'n')
            tags: Element[set[str]] = Element(set[str], 't')
            values: Element[Iterable[Decimal]] = Element(Iterable[Decimal], 'v')

        instance = Containers(numbers=(1, 2, 3), tags={'a'}, values=[Decimal('1.50')])
        root = serialize(instance)
        assert child_names(root) == ['n', 'n', 'n', 't', 'v']
        result = deserialize(Containers, root)
        assert result.numbers == (1, 2, 3)
        assert result.tags == {'a'}
        assert result.values == [Decimal('1.50')]

    def test_polymorphic_sequence(self) -> None:
        class Taxes(DFeObject, root='taxes'):
            items: Element[list[PisTax]] = Element(list[PisTax])

        taxes = Taxes(items=[PisNt(cst='04'), PisAliq(cst='01', v_bc=Decimal(10), p_pis=Decimal('0.0165'), v_pis=Decimal('0.17')), PisNt(cst='06')])
        root = serialize(taxes)
        assert child_names(root) == ['PISNT', 'PISAliq', 'PISNT']
        assert deserialize(Taxes, root, registry=registry) == taxes

    def test_polymorphic_field_and_sequence(self) -> None:
        class Taxes(DFeObject, root='taxes'):
            main: Element[PisTax | None] = Element(PisTax, order=1)
            extra: Element[list[PisTax]] = Element(list[PisTax], order=2)

        taxes = Taxes(main=PisNt(cst='04'), extra=[PisNt(cst='06'), PisAliq(cst='01', v_bc=Decimal(10), p_pis=Decimal('0.0165'), v_pis=Decimal('0.17'))])
        root = serialize(taxes)
        assert child_names(root) == ['PISNT', 'PISNT', 'PISAliq']
        result = deserialize(Taxes, root, registry=registry)
        assert result.main == PisNt(cst='04')
        assert result.extra == [PisNt(cst='06'), PisAliq(cst='01', v_bc=Decimal(10), p_pis=Decimal('0.0165'), v_pis=Decimal('0.17'))]
        assert result == taxes

    def test_polymorphic_fields_share_parent(self) -> None:
        class Pair(DFeObject, root='pair'):
            first: Element[PisTax | None] = Element(PisTax, order=1)
            second: Element[PisTax | None] = Element(PisTax, order=2)

        pair = Pair(first=PisNt(cst='04'), second=PisNt(cst='06'))
        assert deserialize(Pair, serialize(pair), registry=registry) == pair

    def test_dictionary_none_values(self) -> None:
        class Notes(DFeObject, root='notes'):
            texts: Dictionary[dict[str, str]] = Dictionary(dict[str, str], 'texts', item_name='note', key=DictionaryKey('id'), value=DictionaryValue('text'))
            products: Dictionary[dict[int, Prod]] = Dictionary(dict[int, Prod], 'products', item_name='item', key=DictionaryKey('id'), value=DictionaryValue('prod'))

        notes = Notes(texts={'a': 'first', 'b': None}, products={7: None})  # type: ignore[dict-item]
        root = serialize(notes)
        assert [len(entry) for entry in root.findall('texts/note')] == [1, 0]
        assert [len(entry) for entry in root.findall('products/item')] == [0]
        result = deserialize(Notes, root)
        assert result.texts == {'a': 'first', 'b': None}
        assert result.products == {7: None}

    def test_dictionary_round_trip(self) -> None:
        class Counters(DFeObject, root='counters'):
            values: Dictionary[dict[str, int]] = Dictionary(
                dict[str, int],
                'values',
                item_name='entry',
                key=DictionaryKey('name', as_attribute=False),
                value=DictionaryValue('count'),
            )

        counters = Counters(values={'A': 1, 'B': 2})
        root = serialize(counters)
        wrapper = root.find('values')
        assert wrapper is not None
        assert len(wrapper) == 2
        assert [entry.findtext('name') for entry in wrapper] == ['A', 'B']
        assert [entry.findtext('count') for entry in wrapper] == ['1', '2']
        assert deserialize(Counters, root) == counters
        assert child_names(serialize(Counters())) == ['values']
        assert deserialize(Counters, etree.Element('counters')).values == {}

    def test_dictionary_object_values(self) -> None:
        class Catalog(DFeObject, root='catalog'):
            products: Dictionary[dict[int, Prod]] = Dictionary(dict[int, Prod], 'products', item_name='item', key=DictionaryKey('id'), value=DictionaryValue('prod'))

        catalog = Catalog(products={7: Prod(c_prod='7', x_prod='Cafe', cfop='5102', u_com='UN', q_com=Decimal(1), v_un_com=Decimal(5), ind_regra='A')})
        root = serialize(catalog)
        assert root.find('products/item').get('id') == '7'
        assert root.findtext('products/item/prod/xProd') == 'Cafe'
        assert deserialize(Catalog, root) == catalog


class TestErrors:

    def test_failure_locality(self) -> None:
        cfe = make_cfe()
        tax = cfe.inf_cfe.det[0].imposto.pis.tax
        assert isinstance(tax, PisAliq)
        tax.v_bc = 'not a number'  # type: ignore[assignment]
        with pytest.raises(ObjectMappingError, match=r'Cannot serialize PisAliq\.v_bc: expected a decimal number, got str') as exc_info:
            serialize(cfe)
        error = exc_info.value
        assert error.type_name == 'CFe'
        assert error.location == PathFrame('PisAliq', 'v_bc')
        assert error.path == (
            PathFrame('CFe', 'inf_cfe'),
            PathFrame('InfCFe', 'det'),
            PathFrame('Det', 'imposto'),
            PathFrame('Imposto', 'pis'),
            PathFrame('Pis', 'tax'),
            PathFrame('PisAliq', 'v_bc'),
        )
        assert isinstance(error.root_cause, TypeError)
        assert 'CFe.inf_cfe -> InfCFe.det' in str(error)

    def test_recursive_failure_path(self) -> None:
        class TreeBase(ABC):  # noqa: B024
            pass

        class TreeNode(DFeObject, TreeBase, root='node'):
            value: Element[Decimal] = Element(Decimal, 'value', order=1)
            child: Element[TreeBase | None] = Element(TreeBase, order=2)

        expected_path = (PathFrame('TreeNode', 'child'), PathFrame('TreeNode', 'child'), PathFrame('TreeNode', 'value'))

        tree = TreeNode(value=Decimal(1), child=TreeNode(value=Decimal(2), child=TreeNode(value='bad')))  # type: ignore[arg-type]
        with pytest.raises(ObjectMappingError, match=r'Cannot serialize TreeNode\.value') as exc_info:
            serialize(tree)
        assert exc_info.value.path == expected_path
        assert 'TreeNode.child -> TreeNode.child -> TreeNode.value' in str(exc_info.value)

        xml = '<node><value>1</value><node><value>2</value><node><value>bad</value></node></node></node>'
        with pytest.raises(ObjectMappingError, match=r'Cannot deserialize TreeNode\.value') as exc_info:
            from_string(TreeNode, xml, registry=TypeRegistry([TreeNode]))
        assert exc_info.value.path == expected_path

    def test_own_field_error_path(self) -> None:
        xml = '<prod><cProd>1</cProd><CFOP>5102</CFOP><uCom>UN</uCom><qCom>1</qCom><vUnCom>1.000</vUnCom><indRegra>A</indRegra></prod>'
        with pytest.raises(ObjectMappingError) as exc_info:
            from_string(Det, f'<det nItem="1">{xml}</det>')
        assert exc_info.value.path == (PathFrame('Det', 'prod'), PathFrame('Prod', 'x_prod'))
        cause = exc_info.value.root_cause
        assert isinstance(cause, ShapeMismatchError)
        assert cause.path == (PathFrame('Prod', 'x_prod'),)

    def test_deserialize_bad_value(self) -> None:
        xml = '<det nItem="first"/>'
        with pytest.raises(ObjectMappingError, match=r'Cannot deserialize Det\.n_item: invalid literal') as exc_info:
            from_string(Det, xml)
        assert exc_info.value.location == PathFrame('Det', 'n_item')
        assert isinstance(exc_info.value.root_cause, ValueError)

    def test_bad_enum_value(self) -> None:
        with pytest.raises(ObjectMappingError, match=r'invalid value .9. for Environment'):
            from_string(CFe, '<CFe><infCFe versao="0.07" Id="x"><ide><tpAmb>9</tpAmb></ide></infCFe></CFe>', options=SerializerOptions(strict_required=False))

    def test_mapping_without_dictionary_metadata(self) -> None:
        class Plain(DFeObject, root='plain'):
            values: Element[dict[str, str]] = Element(dict[str, str])

        with pytest.raises(ObjectMappingError, match=r'Plain\.values field has a mapping type but no wrapper metadata') as exc_info:
            serialize(Plain(values={'a': 'b'}))
        assert isinstance(exc_info.value.__cause__, FieldMappingError)

    def test_non_primitive_attribute(self) -> None:
        class Broken(DFeObject, root='broken'):
            items: Attribute[list[int]] = Attribute(list[int])

        with pytest.raises(ObjectMappingError, match=r'Broken\.items attribute must have a primitive type'):
            serialize(Broken(items=[1]))

    def test_missing_required_object(self) -> None:
        with pytest.raises(ObjectMappingError, match=r"the required 'prod' element is missing"):
            serialize(Det(n_item=1, imposto=Imposto()))

    def test_wrong_item_type(self) -> None:
        cfe = make_cfe()
        cfe.inf_cfe.det.append(Prod())  # type: ignore[arg-type]
        with pytest.raises(ObjectMappingError, match=r'expected a Det item, got Prod') as exc_info:
            serialize(cfe)
        assert exc_info.value.location == PathFrame('InfCFe', 'det')

    def test_polymorphic_value_type(self) -> None:
        with pytest.raises(ObjectMappingError, match=r'expected a DFeObject instance, got str'):
            serialize(Pis(tax='PISNT'), name='PIS')  # type: ignore[arg-type]

    def test_abstract_type(self) -> None:
        class Base(DFeObject, ABC):
            code: Element[str] = Element(str, 'code')

            @abstractmethod
            def describe(self) -> str: ...

        with pytest.raises(ObjectMappingError, match=r'Cannot deserialize Base object'):
            ObjectSerializer().deserialize_object(Base, etree.Element('base'))


class TestTypeRegistry:

    def test_register(self) -> None:
        types = TypeRegistry()
        types.register(PisAliq)
        types.register(PisNt, 'PISNT', 'PISNaoTributado')
        assert types.names() == ('PISAliq', 'PisAliq', 'PISNT', 'PISNaoTributado')
        assert types.resolve('PISAliq') is PisAliq
        assert types.resolve('PisAliq') is PisAliq
        assert types.resolve('PISNaoTributado') is PisNt
        assert types.resolve('PISOutr') is None
        assert 'PISNT' in types
        assert len(types) == 4

    def test_decorator(self) -> None:
        types = TypeRegistry()

        @types.register
        class Cofins(DFeObject, root='COFINSAliq'):
            cst: Element[str] = Element(str, 'CST')

        assert types.resolve('COFINSAliq') is Cofins

    def test_conflicts(self) -> None:
        types = TypeRegistry([PisNt])
        types.register(PisNt)  # registering the same type again is allowed

        class Other(DFeObject, root='PISNT'):
            pass

        with pytest.raises(ValueError, match=r"the 'PISNT' tag name is already registered for PisNt"):
            types.register(Other)

    def test_register_non_object(self) -> None:
        with pytest.raises(TypeError, match=r'can only register DFeObject subclasses'):
            TypeRegistry().register(PisTax)  # type: ignore[arg-type]


class TestOptions:

    def test_accents_and_trimming(self) -> None:
        options = SerializerOptions(remove_accents=True)
        root = serialize(Prod(x_prod='  Pão de queijo  ', c_prod='1'), name='prod', options=options)
        assert root.findtext('xProd') == 'Pao de queijo'
        root = serialize(Prod(x_prod='  Pão de queijo  ', c_prod='1'), name='prod', options=options.replace(trim_strings=False, remove_accents=False))
        assert root.findtext('xProd') == '  Pão de queijo  '

    def test_rounding(self) -> None:
        root = serialize(PisAliq(cst='01', v_bc=Decimal('2.345'), p_pis=Decimal('0.01655')))
        assert root.findtext('vBC') == '2.35'
        assert root.findtext('pPIS') == '0.0166'
        assert root.find('vPIS') is None

    def test_length_warnings(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger='dfexml'):
            serialize(PisNt(cst='4'))
        assert "The value of 'CST' is shorter than 2 characters: '4'" in caplog.text
        caplog.clear()
        with caplog.at_level(logging.WARNING, logger='dfexml'):
            serialize(PisNt(cst='4'), options=SerializerOptions(check_length=False))
        assert caplog.text == ''

    def test_explicit_kind(self) -> None:
        class Amount(DFeObject, root='amount'):
            value: Element[Decimal] = Element(Decimal, 'value', kind=FieldKind.DEC10)

        assert serialize(Amount(value=Decimal('0.5'))).findtext('value') == '0.5000000000'
