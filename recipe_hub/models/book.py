import uuid

from recipe_hub.extensions import db

DEFAULT_ICON = '📖'


class RecipeBook(db.Model):
    __tablename__ = 'books'
    __table_args__ = (
        db.Index('idx_books_owner', 'owner_id', 'archived'),
    )

    id = db.Column(db.String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    owner_id = db.Column(db.String(128), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    icon = db.Column(db.String(255), nullable=False, default=DEFAULT_ICON)
    recipe_ids = db.Column(db.JSON, nullable=False, default=list)
    recipe_count = db.Column(db.Integer, nullable=False, default=0)
    archived = db.Column(db.Boolean, nullable=False, default=False)
    archived_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, default=db.func.now())
    updated_at = db.Column(db.DateTime, default=db.func.now(), onupdate=db.func.now())
    # Bumped on every row update; a write based on a stale read fails instead of overwriting.
    revision = db.Column(db.Integer, nullable=False)

    __mapper_args__ = {'version_id_col': revision}

    def add_recipe(self, recipe_id):
        ids = list(self.recipe_ids or [])
        if recipe_id in ids:
            return
        # Reassign so the JSON column registers the change.
        self.recipe_ids = ids + [recipe_id]
        self.recipe_count = len(self.recipe_ids)

    def remove_recipe(self, recipe_id):
        ids = [i for i in (self.recipe_ids or []) if i != recipe_id]
        self.recipe_ids = ids
        self.recipe_count = len(ids)

    def to_dict(self):
        return {
            'id': self.id,
            'ownerId': self.owner_id,
            'name': self.name,
            'description': self.description,
            'image': self.icon,
            'recipeIds': list(self.recipe_ids or []),
            'recipeCount': self.recipe_count,
            'archived': self.archived,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
