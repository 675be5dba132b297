"""Metric/imperial conversion for ingredient amounts.

Weights convert through grams and volumes through millilitres. Units never
convert across measurement types, and unknown units pass through untouched so
free-text measures ("pinch", "handful") survive a conversion request.
"""
import math
from collections import namedtuple

METRIC = 'metric'
IMPERIAL = 'imperial'
SYSTEMS = (METRIC, IMPERIAL)

WEIGHT = 'weight'
VOLUME = 'volume'

Unit = namedtuple('Unit', ['type', 'to_base', 'system'])

UNITS = {
    'g': Unit(WEIGHT, 1, METRIC),
    'kg': Unit(WEIGHT, 1000, METRIC),
    'oz': Unit(WEIGHT, 28.3495, IMPERIAL),
    'lb': Unit(WEIGHT, 453.592, IMPERIAL),
    'ml': Unit(VOLUME, 1, METRIC),
    'l': Unit(VOLUME, 1000, METRIC),
    'L': Unit(VOLUME, 1000, METRIC),
    'cup': Unit(VOLUME, 236.588, IMPERIAL),
    'cups': Unit(VOLUME, 236.588, IMPERIAL),
    'tbsp': Unit(VOLUME, 14.7868, IMPERIAL),
    'tsp': Unit(VOLUME, 4.92892, IMPERIAL),
    'fl oz': Unit(VOLUME, 29.5735, IMPERIAL),
    'pint': Unit(VOLUME, 473.176, IMPERIAL),
    'quart': Unit(VOLUME, 946.353, IMPERIAL),
    'gallon': Unit(VOLUME, 3785.41, IMPERIAL),
}

# Ranked candidates when converting into a system.
PREFERRED_UNITS = {
    METRIC: {
        WEIGHT: ['g', 'kg'],
        VOLUME: ['ml', 'L'],
    },
    IMPERIAL: {
        WEIGHT: ['oz', 'lb'],
        VOLUME: ['tsp', 'tbsp', 'cup', 'fl oz'],
    },
}

# (upper bound, step) pairs; the first bound the amount falls below wins.
ROUNDING = {
    'tsp': [(5, 0.25), (math.inf, 0.5)],
    'tbsp': [(5, 0.25), (math.inf, 0.5)],
    'cup': [(2, 0.125), (math.inf, 0.25)],
    'cups': [(2, 0.125), (math.inf, 0.25)],
    'fl oz': [(10, 0.5), (math.inf, 1)],
    'oz': [(10, 0.5), (math.inf, 1)],
    'lb': [(2, 0.25), (math.inf, 0.5)],
    'g': [(50, 5), (500, 10), (math.inf, 25)],
    'kg': [(5, 0.1), (math.inf, 0.25)],
    'ml': [(50, 5), (250, 10), (math.inf, 25)],
    'l': [(5, 0.1), (math.inf, 0.25)],
    'L': [(5, 0.1), (math.inf, 0.25)],
    'pint': [(2, 0.25), (math.inf, 0.5)],
    'quart': [(2, 0.25), (math.inf, 0.5)],
    'gallon': [(2, 0.25), (math.inf, 0.5)],
}
DEFAULT_STEP = 0.01

FRACTIONS = [
    (0.125, '⅛'),
    (0.25, '¼'),
    (0.33, '⅓'),
    (0.5, '½'),
    (0.67, '⅔'),
    (0.75, '¾'),
]
FRACTION_TOLERANCE = 0.05

# Candidate range for a "readable" converted amount: [low, high).
READABLE_LOW = 0.25
READABLE_HIGH = 1000


def _round_half_up(value):
    return math.floor(value + 0.5)


def _round_to_step(value, step):
    # Dividing by the reciprocal keeps fractional steps exact (x * 4 / 4).
    if step < 1:
        per_unit = round(1 / step)
        return _round_half_up(value * per_unit) / per_unit
    return _round_half_up(value / step) * step


def _number_str(value):
    if value == int(value):
        return str(int(value))
    return str(value)


def is_convertible(unit):
    return bool(unit) and unit in UNITS


def opposite_system(unit):
    """The system a unit toggles to, or None for unknown units."""
    if not is_convertible(unit):
        return None
    return IMPERIAL if UNITS[unit].system == METRIC else METRIC


def round_by_unit(amount, unit):
    for upper, step in ROUNDING.get(unit, []):
        if amount < upper:
            return _round_to_step(amount, step)
    return _round_to_step(amount, DEFAULT_STEP)


def _best_unit(base_amount, candidates):
    best_unit = candidates[0]
    best_amount = base_amount / UNITS[best_unit].to_base
    for unit in candidates:
        converted = base_amount / UNITS[unit].to_base
        if not READABLE_LOW <= converted < READABLE_HIGH:
            continue
        best_out_of_range = not READABLE_LOW <= best_amount < READABLE_HIGH
        if best_out_of_range or (converted >= 1 and converted < best_amount):
            best_unit, best_amount = unit, converted
    return best_unit, best_amount


def convert(amount, from_unit, to_system):
    """Convert ``amount`` of ``from_unit`` into the best-fitting unit of ``to_system``.

    Returns an ``(amount, unit)`` tuple. Unknown units and conversions within
    the same system are returned unchanged.
    """
    if not is_convertible(from_unit):
        return amount, from_unit

    source = UNITS[from_unit]
    if source.system == to_system:
        return amount, from_unit

    candidates = PREFERRED_UNITS.get(to_system, {}).get(source.type)
    if not candidates:
        return amount, from_unit

    base_amount = amount * source.to_base
    unit, converted = _best_unit(base_amount, candidates)
    return round_by_unit(converted, unit), unit


def format_as_fraction(value):
    for target, glyph in FRACTIONS:
        if abs(value - target) < FRACTION_TOLERANCE:
            return glyph
    return _number_str(_round_half_up(value * 10) / 10)


def _is_glyph(text):
    return any(text == glyph for _, glyph in FRACTIONS)


def format_amount(amount):
    """Render an amount the way a cook reads it: 2, ½, 1 ½, 0.1."""
    if amount % 1 == 0:
        return _number_str(amount)
    if amount < 1:
        return format_as_fraction(amount)

    whole = math.floor(amount)
    remainder = amount - whole
    if remainder < FRACTION_TOLERANCE:
        return str(whole)

    fraction = format_as_fraction(remainder)
    if _is_glyph(fraction):
        return f'{whole} {fraction}'
    return _number_str(_round_half_up(amount * 10) / 10)
