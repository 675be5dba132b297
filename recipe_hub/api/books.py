from flask import current_app, jsonify, request
from flask_jwt_extended import jwt_required

from . import books_bp
from ..services import BookService, current_auth


@books_bp.route('', methods=['GET'])
@jwt_required()
def get_books():
    books = BookService.list_books(current_auth())
    return jsonify([book.to_dict() for book in books]), 200


@books_bp.route('/<book_id>', methods=['GET'])
@jwt_required()
def get_book_recipes(book_id):
    recipes = BookService.list_recipes(current_auth(), book_id)
    return jsonify([recipe.to_dict() for recipe in recipes]), 200


@books_bp.route('', methods=['POST'])
@jwt_required()
def create_book():
    book = BookService.create_book(current_auth(), request.get_json(silent=True))
    return jsonify({
        'message': 'Recipe book created successfully',
        'id': book.id,
        'book': book.to_dict()
    }), 201


@books_bp.route('/<book_id>', methods=['PUT'])
@jwt_required()
def update_book(book_id):
    book = BookService.update_book(current_auth(), book_id, request.get_json(silent=True))
    return jsonify({'message': 'Recipe book updated successfully', 'book': book.to_dict()}), 200


@books_bp.route('/<book_id>', methods=['DELETE'])
@jwt_required()
def delete_book(book_id):
    auth = current_auth()
    BookService.archive_book(auth, book_id)
    current_app.logger.info('Book %s deleted by %s', book_id, auth.user_id)
    return jsonify({'message': 'Recipe book deleted successfully'}), 200
