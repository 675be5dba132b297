from recipe_hub.utils.diff import ADDITION, DELETION, MODIFICATION, UNCHANGED, diff


def _version(number, **data):
    snapshot = {
        'name': 'Soup', 'description': '', 'cookTime': '', 'servings': 2,
        'ingredients': ['water'], 'instructions': ['Boil'], 'originalSource': '', 'viewCount': 0,
    }
    snapshot.update(data)
    return {'version': number, 'data': snapshot}


def _types(block):
    return [line['type'] for line in block['lines']]


def test_identical_versions_have_no_changes():
    result = diff(_version(1), _version(2)).to_dict()
    assert result['stats'] == {'additions': 0, 'deletions': 0, 'changes': 0}
    assert result['details']['status'] == 'unchanged'
    assert result['ingredients']['status'] == 'unchanged'


def test_insert_at_top_is_positional():
    a = _version(1, ingredients=['a', 'b', 'c'])
    b = _version(2, ingredients=['x', 'a', 'b', 'c'])
    result = diff(a, b).to_dict()
    assert _types(result['ingredients']) == [MODIFICATION, MODIFICATION, MODIFICATION, ADDITION]
    assert result['stats'] == {'additions': 1, 'deletions': 0, 'changes': 3}


def test_removed_tail_lines_are_deletions():
    a = _version(1, instructions=['Chop', 'Boil', 'Serve'])
    b = _version(2, instructions=['Chop'])
    result = diff(a, b).to_dict()
    assert _types(result['instructions']) == [UNCHANGED, DELETION, DELETION]
    assert result['instructions']['lines'][1] == {'index': 2, 'type': DELETION, 'before': 'Boil', 'after': None}


def test_detail_comparison_is_strict():
    result = diff(_version(1, servings=4), _version(2, servings='4')).to_dict()
    servings = next(line for line in result['details']['lines'] if line['label'] == 'Servings')
    assert servings['type'] == MODIFICATION
    assert result['stats']['changes'] == 1


def test_each_changed_detail_counts_once():
    result = diff(_version(1), _version(2, name='Stew', viewCount=3)).to_dict()
    assert result['stats']['changes'] == 2
    assert result['version1'] == 1 and result['version2'] == 2


def test_structured_ingredients_compare_structurally():
    a = _version(1, ingredients=[{'amount': 1, 'metric': 'cup', 'name': 'rice'}])
    b = _version(2, ingredients=[{'amount': 2, 'metric': 'cup', 'name': 'rice'}])
    line = diff(a, b).to_dict()['ingredients']['lines'][0]
    assert line == {'index': 1, 'type': MODIFICATION, 'before': '1 cup rice', 'after': '2 cup rice'}


def test_free_text_matches_structured_through_its_rendering():
    a = _version(1, ingredients=['1 cup rice'])
    b = _version(2, ingredients=[{'amount': 1, 'metric': 'cup', 'name': 'rice'}])
    assert _types(diff(a, b).to_dict()['ingredients']) == [UNCHANGED]


def test_sections_contribute_heading_lines():
    a = _version(1, ingredients=[{'section': 'Base', 'items': ['stock']}])
    b = _version(2, ingredients=[
        {'section': 'Base', 'items': ['stock']},
        {'section': 'Garnish', 'items': ['parsley']},
    ])
    result = diff(a, b).to_dict()
    assert [line['after'] for line in result['ingredients']['lines']] == ['Base', 'stock', 'Garnish', 'parsley']
    assert _types(result['ingredients']) == [UNCHANGED, UNCHANGED, ADDITION, ADDITION]


def test_single_changed_line():
    result = diff(_version(1, ingredients=['a', 'b']), _version(2, ingredients=['a', 'c'])).to_dict()
    assert _types(result['ingredients']) == [UNCHANGED, MODIFICATION]
    assert result['stats'] == {'additions': 0, 'deletions': 0, 'changes': 1}


def test_appended_line_only_affects_the_tail():
    result = diff(_version(1, ingredients=['a', 'b']), _version(2, ingredients=['a', 'b', 'c'])).to_dict()
    assert _types(result['ingredients']) == [UNCHANGED, UNCHANGED, ADDITION]
