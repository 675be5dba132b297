import logging
import math
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import NotFound, ValidationError, VersionConflict
from ..extensions import db
from ..models import Recipe, RecipeBook, Version
from ..utils.shapes import (
    encode_ingredients, encode_instructions, ingredient_names, load_ingredients, render_ingredient,
)
from ..utils.units import SYSTEMS
from ..utils.validators import validate_recipe

logger = logging.getLogger(__name__)

INITIAL_VERSION_NOTES = 'Initial version'
UPDATE_VERSION_NOTES = 'Updated recipe'

# A concurrent writer won: duplicate version number, or a book row changed since it was read.
WRITE_CONFLICTS = (IntegrityError, StaleDataError)


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RecipeService:
    """Recipe CRUD plus the versioning engine.

    Every create and update appends exactly one ``Version`` in the same
    transaction as the recipe write. Version numbers are claimed with a
    compare-and-swap on ``Recipe.current_version`` so two writers racing on
    the same recipe can never both get the same number; the loser re-reads
    and retries.
    """

    @staticmethod
    def get_recipe(auth, recipe_id):
        recipe = Recipe.query.filter_by(id=recipe_id, owner_id=auth.user_id, archived=False).first()
        if recipe is None:
            raise NotFound('Recipe not found')
        return recipe

    @staticmethod
    def _active_book(auth, book_id):
        """Active book about to gain a recipe, row-locked where the database supports it"""
        book = RecipeBook.query.filter_by(id=book_id, owner_id=auth.user_id, archived=False) \
            .with_for_update().first()
        if book is None:
            raise NotFound('Recipe book not found')
        return book

    @staticmethod
    def _linked_book(auth, book_id):
        """Book a recipe is leaving, archived or not; None when it is gone"""
        if not book_id:
            return None
        return RecipeBook.query.filter_by(id=book_id, owner_id=auth.user_id).with_for_update().first()

    @staticmethod
    def _record_version(recipe, number, author, notes):
        version = Version(
            recipe_id=recipe.id,
            owner_id=recipe.owner_id,
            version=number,
            author=author,
            notes=notes,
            data=recipe.snapshot(),
        )
        db.session.add(version)
        return version

    @staticmethod
    def _apply_fields(recipe, fields):
        for attr, value in fields.items():
            if attr == 'ingredients':
                recipe.ingredients = encode_ingredients(value)
                recipe.tags = ingredient_names(value)
            elif attr == 'instructions':
                recipe.instructions = encode_instructions(value)
            else:
                setattr(recipe, attr, value)

    @classmethod
    def create_recipe(cls, auth, data):
        fields = validate_recipe(data)
        attempts = current_app.config.get('VERSION_WRITE_RETRIES', 3)

        for attempt in range(1, attempts + 1):
            book = cls._active_book(auth, fields['book_id'])
            try:
                recipe = Recipe(owner_id=auth.user_id, view_count=0, current_version=1, archived=False)
                cls._apply_fields(recipe, fields)
                db.session.add(recipe)
                # Assigns the id the version row and the book need.
                db.session.flush()

                cls._record_version(recipe, 1, auth.author, INITIAL_VERSION_NOTES)
                book.add_recipe(recipe.id)
                db.session.commit()
            except WRITE_CONFLICTS:
                db.session.rollback()
                logger.warning('Book %s changed while adding a recipe (attempt %d/%d)',
                               fields['book_id'], attempt, attempts)
                continue

            logger.info('User %s created recipe %s in book %s', auth.user_id, recipe.id, book.id)
            return recipe

        raise VersionConflict('Recipe book was modified concurrently, please retry')

    @staticmethod
    def _claim_version(recipe_id, owner_id, expected):
        """Move current_version from ``expected`` to ``expected + 1``; False if another writer got there first."""
        claimed = Recipe.query.filter_by(
            id=recipe_id, owner_id=owner_id, current_version=expected, archived=False
        ).update({Recipe.current_version: expected + 1}, synchronize_session=False)
        return claimed == 1

    @classmethod
    def update_recipe(cls, auth, recipe_id, data, notes=None, author=None):
        """Partially update a recipe and append the next version.

        Only the fields present in ``data`` change. A new ``bookId`` moves the
        recipe between books. Raises NotFound for missing or archived recipes
        and VersionConflict when the version number cannot be claimed.
        """
        fields = validate_recipe(data, partial=True)
        attempts = current_app.config.get('VERSION_WRITE_RETRIES', 3)

        for attempt in range(1, attempts + 1):
            recipe = cls.get_recipe(auth, recipe_id)
            old_book_id = recipe.book_id or ''
            new_book_id = fields.get('book_id', old_book_id)
            new_book = None
            if new_book_id and new_book_id != old_book_id:
                new_book = cls._active_book(auth, new_book_id)

            expected = recipe.current_version
            if not cls._claim_version(recipe.id, auth.user_id, expected):
                db.session.rollback()
                logger.warning('Version %d of recipe %s already claimed (attempt %d/%d)',
                               expected + 1, recipe_id, attempt, attempts)
                continue

            try:
                # Pick up view counts committed since the read above.
                db.session.refresh(recipe)
                cls._apply_fields(recipe, fields)
                recipe.current_version = expected + 1

                if new_book_id != old_book_id:
                    cls._move_between_books(auth, recipe.id, old_book_id, new_book)

                cls._record_version(recipe, expected + 1, author or auth.author,
                                    notes or UPDATE_VERSION_NOTES)
                db.session.commit()
            except WRITE_CONFLICTS:
                db.session.rollback()
                logger.warning('Conflicting write for version %d of recipe %s (attempt %d/%d)',
                               expected + 1, recipe_id, attempt, attempts)
                continue

            logger.info('User %s updated recipe %s to version %d', auth.user_id, recipe_id, expected + 1)
            return recipe

        raise VersionConflict()

    @classmethod
    def _move_between_books(cls, auth, recipe_id, old_book_id, new_book):
        old_book = cls._linked_book(auth, old_book_id)
        if old_book is not None:
            old_book.remove_recipe(recipe_id)
        if new_book is not None:
            new_book.add_recipe(recipe_id)
        logger.info('Recipe %s moved from book %r to %r', recipe_id, old_book_id,
                    new_book.id if new_book else '')

    @classmethod
    def view_recipe(cls, auth, recipe_id):
        """Fetch a recipe, counting the view with a server-side increment"""
        counted = Recipe.query.filter_by(id=recipe_id, owner_id=auth.user_id, archived=False) \
            .update({Recipe.view_count: Recipe.view_count + 1}, synchronize_session=False)
        if not counted:
            raise NotFound('Recipe not found')
        db.session.commit()
        return cls.get_recipe(auth, recipe_id)

    @classmethod
    def archive_recipe(cls, auth, recipe_id):
        attempts = current_app.config.get('VERSION_WRITE_RETRIES', 3)

        for attempt in range(1, attempts + 1):
            recipe = cls.get_recipe(auth, recipe_id)
            try:
                book = cls._linked_book(auth, recipe.book_id)
                if book is not None:
                    book.remove_recipe(recipe.id)
                recipe.archived = True
                recipe.archived_at = _utcnow()
                db.session.commit()
            except StaleDataError:
                db.session.rollback()
                logger.warning('Book %s changed while archiving recipe %s (attempt %d/%d)',
                               recipe.book_id, recipe_id, attempt, attempts)
                continue

            logger.info('User %s archived recipe %s', auth.user_id, recipe_id)
            return recipe

        raise VersionConflict('Recipe book was modified concurrently, please retry')

    @staticmethod
    def list_recipes(auth, limit=None):
        query = Recipe.query.filter_by(owner_id=auth.user_id, archived=False).order_by(Recipe.name)
        if limit:
            query = query.limit(limit)
        return query.all()

    @staticmethod
    def search_recipes(auth, term):
        """Case-insensitive name prefix search"""
        term = (term or '').strip()
        if not term:
            return []
        escaped = term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
        return Recipe.query.filter(
            Recipe.owner_id == auth.user_id,
            Recipe.archived.is_(False),
            Recipe.name.ilike(f'{escaped}%', escape='\\'),
        ).order_by(Recipe.name).all()

    @classmethod
    def display_ingredients(cls, auth, recipe_id, multiplier=1, system=None):
        """Ingredient lines scaled and optionally converted, in the recipe's own shape"""
        if system is not None and system not in SYSTEMS:
            raise ValidationError(f'system must be one of: {", ".join(SYSTEMS)}')
        if not math.isfinite(multiplier) or multiplier <= 0:
            raise ValidationError('multiplier must be a positive number')

        recipe = cls.get_recipe(auth, recipe_id)
        entries = load_ingredients(recipe.ingredients)

        def render(item):
            return render_ingredient(item, multiplier=multiplier, system=system)

        return {
            'recipeId': recipe.id,
            'multiplier': multiplier,
            'system': system,
            'ingredients': entries.encode(render),
        }
