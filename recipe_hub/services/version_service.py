from ..errors import NotFound
from ..models import Version
from ..utils.diff import diff


class VersionService:
    """Read access to the immutable version history"""

    @staticmethod
    def list_versions(auth, recipe_id):
        """All versions of a recipe, newest first; an unknown recipe has none"""
        return Version.query.filter_by(recipe_id=recipe_id, owner_id=auth.user_id) \
            .order_by(Version.version.desc()).all()

    @staticmethod
    def get_version(auth, version_id):
        version = Version.query.filter_by(id=version_id, owner_id=auth.user_id).first()
        if version is None:
            raise NotFound('Version not found')
        return version

    @staticmethod
    def get_by_number(auth, recipe_id, number):
        version = Version.query.filter_by(
            recipe_id=recipe_id, owner_id=auth.user_id, version=number
        ).first()
        if version is None:
            raise NotFound(f'Version {number} not found')
        return version

    @classmethod
    def compare(cls, auth, recipe_id, v1, v2):
        return cls.get_by_number(auth, recipe_id, v1), cls.get_by_number(auth, recipe_id, v2)

    @classmethod
    def diff(cls, auth, recipe_id, v1, v2):
        version_a, version_b = cls.compare(auth, recipe_id, v1, v2)
        return diff(version_a, version_b)
