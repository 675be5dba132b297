from ..errors import ValidationError
from .shapes import decode_ingredients, decode_instructions

BOOK_FIELDS = ('name', 'description', 'image')


def _is_blank(value):
    return not isinstance(value, str) or value.strip() == ''


def validate_book(data):
    """Every book field is required and must be a non-empty string."""
    if not isinstance(data, dict):
        raise ValidationError('request body must be a JSON object')
    errors = [
        f'{field} is required and must be a non-empty string'
        for field in BOOK_FIELDS if _is_blank(data.get(field))
    ]
    if errors:
        raise ValidationError(errors)
    return {
        'name': data['name'].strip(),
        'description': data['description'].strip(),
        'icon': data['image'].strip(),
    }


def _parse_servings(value):
    if value is None or value == '':
        return 0
    if isinstance(value, bool):
        raise ValueError
    number = int(value)
    if number < 0 or (isinstance(value, float) and not value.is_integer()):
        raise ValueError
    return number


def validate_recipe(data, partial=False):
    """Check a recipe payload and return model-attribute updates.

    With ``partial`` only the fields present in ``data`` are checked and
    returned; otherwise name, bookId, ingredients and instructions are
    required. Ingredient and instruction lists come back decoded into their
    tagged shapes under ``ingredients``/``instructions``.
    """
    if not isinstance(data, dict):
        raise ValidationError('request body must be a JSON object')

    errors = []
    updates = {}

    def present(field):
        return field in data if partial else True

    if present('name'):
        if _is_blank(data.get('name')):
            errors.append('name is required and must be a non-empty string')
        else:
            updates['name'] = data['name'].strip()

    if present('bookId'):
        if _is_blank(data.get('bookId')):
            errors.append('a book must be assigned to the recipe')
        else:
            updates['book_id'] = data['bookId'].strip()

    for field, decode in (('ingredients', decode_ingredients), ('instructions', decode_instructions)):
        if not present(field):
            continue
        raw = data.get(field)
        if not raw:
            errors.append(f'at least one {field[:-1]} is required')
            continue
        try:
            updates[field] = decode(raw)
        except ValueError as e:
            errors.append(str(e))

    for field, attr in (('description', 'description'), ('cookTime', 'cook_time'),
                        ('originalSource', 'original_source')):
        if field not in data:
            if not partial:
                updates[attr] = ''
            continue
        value = data[field]
        if value is None:
            value = ''
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            errors.append(f'{field} must be a string')
            continue
        updates[attr] = str(value).strip()

    if 'servings' in data:
        try:
            updates['servings'] = _parse_servings(data['servings'])
        except (TypeError, ValueError):
            errors.append('servings must be a whole number')
    elif not partial:
        updates['servings'] = 0

    if errors:
        raise ValidationError(errors)
    return updates
