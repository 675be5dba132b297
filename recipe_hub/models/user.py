from ..extensions import db


class User(db.Model):
    """Profile of an identity-provider user, keyed by the token subject"""
    __tablename__ = 'users'

    user_id = db.Column(db.String(128), primary_key=True)
    email = db.Column(db.String(255), nullable=True)
    display_name = db.Column(db.String(255), nullable=False, default='')
    created_at = db.Column(db.DateTime, default=db.func.now())
    updated_at = db.Column(db.DateTime, default=db.func.now(), onupdate=db.func.now())
    last_seen = db.Column(db.DateTime, nullable=True)

    def to_dict(self):
        return {
            'userId': self.user_id,
            'email': self.email,
            'displayName': self.display_name,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
            'lastSeen': self.last_seen.isoformat() if self.last_seen else None
        }
