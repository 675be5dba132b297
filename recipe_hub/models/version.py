import uuid

from sqlalchemy import event

from recipe_hub.extensions import db


class ImmutableVersionError(Exception):
    pass


class Version(db.Model):
    """Append-only snapshot of a recipe taken on creation and on every update"""
    __tablename__ = 'versions'
    __table_args__ = (
        db.UniqueConstraint('recipe_id', 'version', name='uq_versions_recipe_version'),
    )

    id = db.Column(db.String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    recipe_id = db.Column(db.String(32), db.ForeignKey('recipes.id'), nullable=False, index=True)
    owner_id = db.Column(db.String(128), nullable=False)
    version = db.Column(db.Integer, nullable=False)
    timestamp = db.Column(db.DateTime, nullable=False, default=db.func.current_timestamp())
    author = db.Column(db.String(255), nullable=False, default='User')
    notes = db.Column(db.Text, nullable=False, default='')
    data = db.Column(db.JSON, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'recipeId': self.recipe_id,
            'ownerId': self.owner_id,
            'version': self.version,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
            'author': self.author,
            'notes': self.notes,
            'data': self.data,
        }


@event.listens_for(Version, 'before_update')
def _refuse_update(mapper, connection, target):
    raise ImmutableVersionError(f'Version {target.id} is immutable')


@event.listens_for(Version, 'before_delete')
def _refuse_delete(mapper, connection, target):
    raise ImmutableVersionError(f'Version {target.id} cannot be deleted')
