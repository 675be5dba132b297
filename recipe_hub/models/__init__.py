# recipe_hub/models/__init__.py
from .book import RecipeBook
from .recipe import Recipe, SNAPSHOT_FIELDS
from .user import User
from .version import ImmutableVersionError, Version

__all__ = [
    'RecipeBook', 'Recipe', 'SNAPSHOT_FIELDS', 'User', 'Version', 'ImmutableVersionError'
]
