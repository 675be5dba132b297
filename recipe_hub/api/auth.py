from flask import jsonify
from flask_jwt_extended import jwt_required

from . import auth_bp
from ..services import AuthService, current_auth


@auth_bp.route('/me', methods=['GET'])
@jwt_required()
def get_current_user():
    """Profile of the authenticated user, created on first sight"""
    user = AuthService.sync_profile(current_auth())
    return jsonify(user.to_dict()), 200


@auth_bp.route('/refresh', methods=['POST'])
@jwt_required(refresh=True)
def refresh():
    """Refresh access token"""
    return jsonify(AuthService.refresh_token(current_auth())), 200
