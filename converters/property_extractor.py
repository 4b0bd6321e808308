"""Turn typed Notion property values into plain display values."""

from typing import Callable, Dict, Union

from models import PropertyKind, PropertyValue
from .text_utils import join_rich_text

DisplayValue = Union[str, int, float, bool]


def _rich_text(prop: PropertyValue) -> DisplayValue:
    return join_rich_text(prop.rich_text)


def _number(prop: PropertyValue) -> DisplayValue:
    return prop.number if prop.number is not None else ''


def _select(prop: PropertyValue) -> DisplayValue:
    return prop.select or ''


def _multi_select(prop: PropertyValue) -> DisplayValue:
    return ', '.join(prop.multi_select)


def _date(prop: PropertyValue) -> DisplayValue:
    return prop.date_start or ''


def _checkbox(prop: PropertyValue) -> DisplayValue:
    # An absent checkbox is treated as unchecked
    return bool(prop.checkbox)


def _plain(prop: PropertyValue) -> DisplayValue:
    return prop.text or ''


def _empty(prop: PropertyValue) -> DisplayValue:
    return ''


EXTRACTORS: Dict[PropertyKind, Callable[[PropertyValue], DisplayValue]] = {
    PropertyKind.TITLE: _rich_text,
    PropertyKind.RICH_TEXT: _rich_text,
    PropertyKind.NUMBER: _number,
    PropertyKind.SELECT: _select,
    PropertyKind.MULTI_SELECT: _multi_select,
    PropertyKind.DATE: _date,
    PropertyKind.CHECKBOX: _checkbox,
    PropertyKind.URL: _plain,
    PropertyKind.EMAIL: _plain,
    PropertyKind.PHONE_NUMBER: _plain,
    PropertyKind.OTHER: _empty,
}


def extract_value(prop: PropertyValue) -> DisplayValue:
    """
    Extract the display value of a property.

    Never raises: kinds without a text form and missing sub-fields all
    degrade to an empty string.

    Args:
        prop: Typed property value

    Returns:
        String, number or boolean
    """
    extractor = EXTRACTORS.get(getattr(prop, 'kind', None), _empty)
    return extractor(prop)


def has_value(value: DisplayValue) -> bool:
    """True when an extracted value is truthy and not just whitespace."""
    if isinstance(value, str):
        return bool(value.strip())
    return bool(value)


__all__ = ['DisplayValue', 'EXTRACTORS', 'extract_value', 'has_value']
