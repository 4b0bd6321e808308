"""Tests for property value extraction."""

import pytest

from conftest import checkbox_prop, number_prop, select_prop, text_prop, title_prop
from converters.property_extractor import EXTRACTORS, extract_value, has_value
from models import PropertyKind, PropertyValue, RichTextRun


class TestExtractValue:
    """Test extraction of each property kind."""

    def test_title_and_rich_text_join_runs(self):
        assert extract_value(title_prop('Ship ', 'it')) == 'Ship it'
        assert extract_value(text_prop('a', 'b', 'c')) == 'abc'

    def test_number(self):
        assert extract_value(number_prop(12.5)) == 12.5
        assert extract_value(number_prop(0)) == 0
        assert extract_value(number_prop(None)) == ''

    def test_select(self):
        assert extract_value(select_prop('Done')) == 'Done'
        assert extract_value(select_prop(None)) == ''

    def test_multi_select(self):
        prop = PropertyValue(kind=PropertyKind.MULTI_SELECT, multi_select=('red', 'blue'))
        assert extract_value(prop) == 'red, blue'
        assert extract_value(PropertyValue(kind=PropertyKind.MULTI_SELECT)) == ''

    def test_date_uses_start(self):
        prop = PropertyValue(kind=PropertyKind.DATE, date_start='2024-03-01')
        assert extract_value(prop) == '2024-03-01'
        assert extract_value(PropertyValue(kind=PropertyKind.DATE)) == ''

    def test_checkbox(self):
        assert extract_value(checkbox_prop(True)) is True
        assert extract_value(checkbox_prop(False)) is False
        assert extract_value(checkbox_prop(None)) is False

    @pytest.mark.parametrize('kind', [PropertyKind.URL, PropertyKind.EMAIL, PropertyKind.PHONE_NUMBER])
    def test_plain_text_kinds(self, kind):
        assert extract_value(PropertyValue(kind=kind, text='value')) == 'value'
        assert extract_value(PropertyValue(kind=kind)) == ''

    def test_unknown_kind_is_empty(self):
        prop = PropertyValue(kind=PropertyKind.OTHER, type_name='relation')
        assert extract_value(prop) == ''

    def test_unknown_type_name_maps_to_other(self):
        assert PropertyKind.from_type_name('formula') is PropertyKind.OTHER
        assert PropertyKind.from_type_name(None) is PropertyKind.OTHER

    def test_object_without_kind_is_empty(self):
        assert extract_value(object()) == ''

    def test_every_kind_has_an_extractor(self):
        assert set(EXTRACTORS) == set(PropertyKind)


class TestHasValue:
    """Test the used-property check."""

    def test_blank_strings_are_unused(self):
        assert not has_value('')
        assert not has_value('   ')

    def test_values(self):
        assert has_value('x')
        assert has_value(True)
        assert has_value(3)
        assert not has_value(False)
        assert not has_value(0)


def test_rich_text_with_links_keeps_only_text():
    prop = PropertyValue(
        kind=PropertyKind.RICH_TEXT,
        rich_text=(RichTextRun('see '), RichTextRun('docs', href='https://example.com'))
    )
    assert extract_value(prop) == 'see docs'
