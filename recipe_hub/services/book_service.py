import logging
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy.orm.exc import StaleDataError

from ..errors import NotFound, VersionConflict
from ..extensions import db
from ..models import Recipe, RecipeBook
from ..utils.validators import validate_book

logger = logging.getLogger(__name__)

BOOK_CONFLICT = 'Recipe book was modified concurrently, please retry'


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BookService:
    """Recipe books, scoped to the owning user"""

    @staticmethod
    def list_books(auth):
        return RecipeBook.query.filter_by(owner_id=auth.user_id, archived=False) \
            .order_by(RecipeBook.name).all()

    @staticmethod
    def get_book(auth, book_id, for_update=False):
        """Active book owned by the caller, or NotFound"""
        query = RecipeBook.query.filter_by(id=book_id, owner_id=auth.user_id, archived=False)
        if for_update:
            query = query.with_for_update()
        book = query.first()
        if book is None:
            raise NotFound('Recipe book not found')
        return book

    @staticmethod
    def list_recipes(auth, book_id):
        """Active recipes in a book; an unknown book simply has none"""
        return Recipe.query.filter_by(owner_id=auth.user_id, book_id=book_id, archived=False) \
            .order_by(Recipe.name).all()

    @staticmethod
    def create_book(auth, data):
        fields = validate_book(data)
        book = RecipeBook(owner_id=auth.user_id, recipe_ids=[], recipe_count=0, **fields)
        db.session.add(book)
        db.session.commit()
        logger.info('User %s created book %s', auth.user_id, book.id)
        return book

    @classmethod
    def update_book(cls, auth, book_id, data):
        fields = validate_book(data)
        attempts = current_app.config.get('VERSION_WRITE_RETRIES', 3)

        for attempt in range(1, attempts + 1):
            book = cls.get_book(auth, book_id, for_update=True)
            for attr, value in fields.items():
                setattr(book, attr, value)
            try:
                db.session.commit()
            except StaleDataError:
                db.session.rollback()
                logger.warning('Book %s changed during update (attempt %d/%d)', book_id, attempt, attempts)
                continue
            return book

        raise VersionConflict(BOOK_CONFLICT)

    @classmethod
    def archive_book(cls, auth, book_id):
        """Archive a book and unassign its recipes in one transaction.

        The archived book keeps its ``recipe_ids`` so the link can be traced.
        """
        attempts = current_app.config.get('VERSION_WRITE_RETRIES', 3)

        for attempt in range(1, attempts + 1):
            book = cls.get_book(auth, book_id, for_update=True)
            now = _utcnow()
            try:
                detached = Recipe.query.filter_by(owner_id=auth.user_id, book_id=book_id) \
                    .update({Recipe.book_id: '', Recipe.updated_at: now}, synchronize_session='fetch')
                book.archived = True
                book.archived_at = now
                db.session.commit()
            except StaleDataError:
                db.session.rollback()
                logger.warning('Book %s changed during archival (attempt %d/%d)', book_id, attempt, attempts)
                continue

            logger.info('User %s archived book %s, detached %d recipe(s)', auth.user_id, book_id, detached)
            return book

        raise VersionConflict(BOOK_CONFLICT)
