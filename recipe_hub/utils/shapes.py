"""Ingredient and instruction payloads, decoded once at the API boundary.

A list is either ``Flat`` (entries) or ``Sectioned`` (named groups of
entries); the wire format tells them apart by a ``section`` key on the first
element. An ingredient is ``FreeText`` (a plain string) or ``Structured``
(amount, metric, name). Instructions are plain strings.
"""
import math
from dataclasses import dataclass
from fractions import Fraction
from typing import Optional, Tuple, Union

from .units import convert, format_amount, is_convertible


@dataclass(frozen=True)
class FreeText:
    text: str

    def display(self):
        return self.text

    def encode(self):
        return self.text


@dataclass(frozen=True)
class Structured:
    amount: Optional[float]
    metric: str
    name: str

    def display(self):
        if not self.amount:
            return self.name
        metric = f' {self.metric}' if self.metric else ''
        return f'{format_amount(self.amount)}{metric} {self.name}'

    def encode(self):
        return {'amount': _encode_amount(self.amount), 'metric': self.metric, 'name': self.name}


Ingredient = Union[FreeText, Structured]


@dataclass(frozen=True)
class Section:
    label: str
    items: Tuple


@dataclass(frozen=True)
class Flat:
    items: Tuple

    def entries(self):
        return list(self.items)

    def encode(self, encode_item):
        return [encode_item(item) for item in self.items]


@dataclass(frozen=True)
class Sectioned:
    sections: Tuple[Section, ...]

    def entries(self):
        return [item for section in self.sections for item in section.items]

    def encode(self, encode_item):
        return [
            {'section': s.label, 'items': [encode_item(item) for item in s.items]}
            for s in self.sections
        ]


EntryList = Union[Flat, Sectioned]


def _encode_amount(amount):
    if amount is None:
        return ''
    if float(amount).is_integer():
        return int(amount)
    return amount


def parse_amount(value):
    """Numbers, numeric strings and simple fractions ("1/2", "1 1/2").

    Amounts must be finite and not negative.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        amount = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            amount = float(sum(Fraction(part) for part in text.split()))
        except (ValueError, ZeroDivisionError):
            raise ValueError(f'invalid amount "{text}"') from None
    if not math.isfinite(amount) or amount < 0:
        raise ValueError(f'invalid amount "{value}"')
    return amount


def is_sectioned(raw):
    return bool(raw) and isinstance(raw[0], dict) and 'section' in raw[0]


def _decode_ingredient(raw):
    if isinstance(raw, str):
        text = raw.strip()
        return FreeText(text) if text else None
    if isinstance(raw, dict):
        name = str(raw.get('name') or '').strip()
        if not name:
            return None
        amount = parse_amount(raw.get('amount'))
        metric = str(raw.get('metric') or '').strip()
        return Structured(amount=amount, metric=metric, name=name)
    raise ValueError('ingredients must be strings or {amount, metric, name} objects')


def _decode_instruction(raw):
    if not isinstance(raw, str):
        raise ValueError('instructions must be strings')
    text = raw.strip()
    return text or None


def _decode_items(raw_items, decode_item):
    items = []
    for raw in raw_items:
        item = decode_item(raw)
        if item is not None:
            items.append(item)
    return tuple(items)


def _decode_list(raw, label, decode_item):
    if not isinstance(raw, list):
        raise ValueError(f'{label} must be a list')

    if not is_sectioned(raw):
        items = _decode_items(raw, decode_item)
        if not items:
            raise ValueError(f'at least one {label[:-1]} is required')
        return Flat(items)

    sections = []
    for raw_section in raw:
        if not isinstance(raw_section, dict) or not isinstance(raw_section.get('items'), list):
            raise ValueError(f'each {label[:-1]} section must have at least one item')
        items = _decode_items(raw_section['items'], decode_item)
        if not items:
            raise ValueError(f'each {label[:-1]} section must have at least one item')
        sections.append(Section(str(raw_section.get('section') or '').strip(), items))

    if len(sections) > 1 and any(not s.label for s in sections):
        raise ValueError(f'all {label[:-1]} sections need a name when using multiple sections')
    return Sectioned(tuple(sections))


def decode_ingredients(raw):
    return _decode_list(raw, 'ingredients', _decode_ingredient)


def decode_instructions(raw):
    return _decode_list(raw, 'instructions', _decode_instruction)


def encode_ingredients(entries):
    return entries.encode(lambda item: item.encode())


def encode_instructions(entries):
    return entries.encode(lambda item: item)


def load_ingredients(stored):
    """Decode a stored (already validated) ingredient list; empty lists become an empty Flat."""
    if not stored:
        return Flat(())
    return decode_ingredients(stored)


def load_instructions(stored):
    if not stored:
        return Flat(())
    return decode_instructions(stored)


def ingredient_names(entries):
    """Lower-cased names of structured ingredients, used as search tags."""
    return [item.name.lower() for item in entries.entries() if isinstance(item, Structured)]


def render_ingredient(item, multiplier=1, system=None):
    """Display string for an entry scaled by ``multiplier``, optionally converted to ``system``."""
    if not isinstance(item, Structured) or not item.amount:
        return item.display()

    amount, metric = item.amount * multiplier, item.metric
    if system and is_convertible(metric):
        amount, metric = convert(amount, metric, system)
    return Structured(amount=amount, metric=metric, name=item.name).display()
