from flask import jsonify
from flask_jwt_extended import jwt_required

from . import versions_bp
from ..extensions import cache
from ..services import VersionService, current_auth


def make_diff_cache_key(user_id, recipe_id, v1, v2):
    return f"version_diff_{user_id}_{recipe_id}_{v1}_{v2}"


@versions_bp.route('/recipe/<recipe_id>', methods=['GET'])
@jwt_required()
def get_recipe_versions(recipe_id):
    versions = VersionService.list_versions(current_auth(), recipe_id)
    return jsonify([version.to_dict() for version in versions]), 200


@versions_bp.route('/compare/<recipe_id>/<int:v1>/<int:v2>', methods=['GET'])
@jwt_required()
def compare_versions(recipe_id, v1, v2):
    version1, version2 = VersionService.compare(current_auth(), recipe_id, v1, v2)
    return jsonify({'version1': version1.to_dict(), 'version2': version2.to_dict()}), 200


@versions_bp.route('/diff/<recipe_id>/<int:v1>/<int:v2>', methods=['GET'])
@jwt_required()
def diff_versions(recipe_id, v1, v2):
    """Structured diff between two versions; versions never change so results are cached"""
    auth = current_auth()
    key = make_diff_cache_key(auth.user_id, recipe_id, v1, v2)
    result = cache.get(key)
    if result is None:
        result = VersionService.diff(auth, recipe_id, v1, v2).to_dict()
        cache.set(key, result)
    return jsonify(result), 200


@versions_bp.route('/<version_id>', methods=['GET'])
@jwt_required()
def get_version(version_id):
    version = VersionService.get_version(current_auth(), version_id)
    return jsonify(version.to_dict()), 200
