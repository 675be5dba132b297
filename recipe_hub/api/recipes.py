from flask import jsonify, request
from flask_jwt_extended import jwt_required

from . import recipes_bp
from ..errors import ValidationError
from ..services import RecipeService, current_auth


@recipes_bp.route('', methods=['GET'])
@jwt_required()
def list_recipes():
    limit = request.args.get('limit', type=int)
    if limit is not None and limit <= 0:
        raise ValidationError('limit must be a positive integer')
    recipes = RecipeService.list_recipes(current_auth(), limit=limit)
    return jsonify([recipe.to_dict() for recipe in recipes]), 200


@recipes_bp.route('/search', methods=['GET'])
@jwt_required()
def search_recipes():
    query = request.args.get('q', '')
    recipes = RecipeService.search_recipes(current_auth(), query)
    return jsonify([recipe.to_dict() for recipe in recipes]), 200


@recipes_bp.route('/<recipe_id>', methods=['GET'])
@jwt_required()
def get_recipe(recipe_id):
    recipe = RecipeService.view_recipe(current_auth(), recipe_id)
    return jsonify(recipe.to_dict()), 200


@recipes_bp.route('/<recipe_id>/display', methods=['GET'])
@jwt_required()
def display_recipe(recipe_id):
    """Ingredients scaled by ``multiplier`` and converted to ``system`` if given"""
    multiplier = request.args.get('multiplier', default=1.0, type=float)
    system = request.args.get('system') or None
    result = RecipeService.display_ingredients(current_auth(), recipe_id, multiplier=multiplier, system=system)
    return jsonify(result), 200


@recipes_bp.route('', methods=['POST'])
@jwt_required()
def create_recipe():
    recipe = RecipeService.create_recipe(current_auth(), request.get_json(silent=True))
    return jsonify({
        'message': 'Recipe created successfully',
        'id': recipe.id,
        'recipe': recipe.to_dict()
    }), 201


@recipes_bp.route('/<recipe_id>', methods=['PUT'])
@jwt_required()
def update_recipe(recipe_id):
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('request body must be a JSON object')
    data = dict(data)
    notes = data.pop('versionNotes', None)
    recipe = RecipeService.update_recipe(current_auth(), recipe_id, data, notes=notes)
    return jsonify({'message': 'Recipe updated successfully', 'recipe': recipe.to_dict()}), 200


@recipes_bp.route('/<recipe_id>', methods=['DELETE'])
@jwt_required()
def delete_recipe(recipe_id):
    RecipeService.archive_recipe(current_auth(), recipe_id)
    return jsonify({'message': 'Recipe deleted successfully'}), 200
