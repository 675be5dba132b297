import pytest

from recipe_hub.utils.shapes import (
    Flat, FreeText, Sectioned, Structured, decode_ingredients, decode_instructions,
    encode_ingredients, ingredient_names, parse_amount, render_ingredient,
)


def test_parse_amount_accepts_numbers_strings_and_fractions():
    assert parse_amount(2) == 2.0
    assert parse_amount('1.5') == 1.5
    assert parse_amount('1/2') == 0.5
    assert parse_amount('1 1/2') == 1.5
    assert parse_amount('') is None
    assert parse_amount(None) is None


def test_parse_amount_rejects_garbage():
    with pytest.raises(ValueError, match='invalid amount'):
        parse_amount('a handful')


@pytest.mark.parametrize('value', [-2, '-1/2', float('nan'), float('inf'), 'Infinity'])
def test_parse_amount_rejects_negative_and_non_finite(value):
    with pytest.raises(ValueError, match='invalid amount'):
        parse_amount(value)


def test_decoding_rejects_nan_amounts():
    with pytest.raises(ValueError, match='invalid amount'):
        decode_ingredients([{'amount': float('nan'), 'metric': 'g', 'name': 'Sugar'}])


def test_decode_flat_mixed_ingredients():
    entries = decode_ingredients([
        {'amount': '2', 'metric': 'cup', 'name': ' Flour '},
        '  pinch of salt ',
        '',
    ])
    assert entries == Flat((Structured(2.0, 'cup', 'Flour'), FreeText('pinch of salt')))
    assert ingredient_names(entries) == ['flour']


def test_decode_sectioned_ingredients():
    entries = decode_ingredients([
        {'section': 'Dough', 'items': [{'amount': 500, 'metric': 'g', 'name': 'Flour'}]},
        {'section': 'Filling', 'items': ['jam']},
    ])
    assert isinstance(entries, Sectioned)
    assert [s.label for s in entries.sections] == ['Dough', 'Filling']
    assert entries.entries() == [Structured(500.0, 'g', 'Flour'), FreeText('jam')]


def test_multiple_sections_need_labels():
    with pytest.raises(ValueError, match='need a name'):
        decode_ingredients([
            {'section': 'Dough', 'items': ['flour']},
            {'section': '', 'items': ['jam']},
        ])


def test_empty_section_is_rejected():
    with pytest.raises(ValueError, match='at least one item'):
        decode_instructions([{'section': 'Prep', 'items': ['  ']}])


def test_blank_list_is_rejected():
    with pytest.raises(ValueError, match='at least one ingredient'):
        decode_ingredients(['', '   '])


def test_encoding_keeps_the_callers_shape():
    raw = [
        {'section': 'Sauce', 'items': [{'amount': 1.5, 'metric': 'tbsp', 'name': 'Soy'}, 'garlic']},
    ]
    assert encode_ingredients(decode_ingredients(raw)) == raw
    assert encode_ingredients(decode_ingredients([{'amount': '2', 'metric': '', 'name': 'Eggs'}])) == [
        {'amount': 2, 'metric': '', 'name': 'Eggs'}
    ]


def test_structured_display():
    assert Structured(0.5, 'tsp', 'salt').display() == '½ tsp salt'
    assert Structured(2, '', 'eggs').display() == '2 eggs'
    assert Structured(None, 'g', 'pepper').display() == 'pepper'


def test_render_ingredient_scales_and_converts():
    milk = Structured(1, 'cup', 'milk')
    assert render_ingredient(milk, multiplier=2) == '2 cup milk'
    assert render_ingredient(milk, multiplier=2, system='metric') == '475 ml milk'
    assert render_ingredient(FreeText('pinch of salt'), multiplier=3) == 'pinch of salt'
    assert render_ingredient(Structured(3, 'clove', 'garlic'), system='metric') == '3 clove garlic'
