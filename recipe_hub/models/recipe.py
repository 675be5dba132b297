# recipe_hub/models/recipe.py
import uuid

from recipe_hub.extensions import db

# Mutable recipe fields copied into every version snapshot, keyed by wire name.
SNAPSHOT_FIELDS = {
    'name': 'name',
    'description': 'description',
    'cookTime': 'cook_time',
    'servings': 'servings',
    'ingredients': 'ingredients',
    'instructions': 'instructions',
    'originalSource': 'original_source',
    'viewCount': 'view_count',
}


class Recipe(db.Model):
    __tablename__ = 'recipes'
    __table_args__ = (
        db.Index('idx_recipes_owner_book', 'owner_id', 'book_id'),
    )

    id = db.Column(db.String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    owner_id = db.Column(db.String(128), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    cook_time = db.Column(db.String(100), nullable=False, default='')
    servings = db.Column(db.Integer, nullable=False, default=0)
    ingredients = db.Column(db.JSON, nullable=False, default=list)
    instructions = db.Column(db.JSON, nullable=False, default=list)
    # Empty string means the recipe is not assigned to a book.
    book_id = db.Column(db.String(32), nullable=False, default='')
    original_source = db.Column(db.Text, nullable=False, default='')
    tags = db.Column(db.JSON, nullable=False, default=list)
    view_count = db.Column(db.Integer, nullable=False, default=0)
    current_version = db.Column(db.Integer, nullable=False, default=1)
    archived = db.Column(db.Boolean, nullable=False, default=False)
    archived_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=db.func.current_timestamp())
    updated_at = db.Column(db.DateTime, nullable=False, default=db.func.current_timestamp(), onupdate=db.func.current_timestamp())

    versions = db.relationship('Version', backref='recipe', lazy='dynamic', order_by='Version.version')

    def snapshot(self):
        """Denormalized copy of the versioned fields as they are right now."""
        return {key: getattr(self, attr) for key, attr in SNAPSHOT_FIELDS.items()}

    def to_dict(self):
        return {
            'id': self.id,
            'ownerId': self.owner_id,
            'name': self.name,
            'description': self.description,
            'cookTime': self.cook_time,
            'servings': self.servings,
            'ingredients': self.ingredients,
            'instructions': self.instructions,
            'bookId': self.book_id,
            'originalSource': self.original_source,
            'tags': list(self.tags or []),
            'viewCount': self.view_count,
            'currentVersion': self.current_version,
            'archived': self.archived,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
