import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from flask import current_app
from flask_jwt_extended import create_access_token, get_jwt, get_jwt_identity

from ..errors import Unauthorized
from ..extensions import db
from ..models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, taken from a verified bearer token."""
    user_id: str
    email: str = None
    name: str = None

    @property
    def author(self):
        return self.name or self.email or current_app.config.get('DEFAULT_VERSION_AUTHOR', 'User')


def current_auth():
    """Build the AuthContext for the request; call inside a ``jwt_required`` view."""
    user_id = get_jwt_identity()
    if not user_id:
        raise Unauthorized('Token has no subject')
    claims = get_jwt()
    return AuthContext(user_id=str(user_id), email=claims.get('email'), name=claims.get('name'))


class AuthService:
    """Profile bookkeeping for identities issued by the external provider"""

    @staticmethod
    def sync_profile(auth):
        """Create or update the caller's profile from token claims"""
        user = db.session.get(User, auth.user_id)
        if user is None:
            user = User(user_id=auth.user_id)
            db.session.add(user)
            logger.info('Created profile for user %s', auth.user_id)

        if auth.email:
            user.email = auth.email
        if auth.name:
            user.display_name = auth.name
        user.last_seen = datetime.now(timezone.utc).replace(tzinfo=None)
        db.session.commit()
        return user

    @staticmethod
    def refresh_token(auth):
        """Generate a new access token carrying the same claims"""
        claims = {key: value for key, value in (('email', auth.email), ('name', auth.name)) if value}
        return {
            'access_token': create_access_token(identity=auth.user_id, additional_claims=claims)
        }
