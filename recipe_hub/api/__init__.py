from flask import Blueprint

# Blueprints are registered under /api by create_app
auth_bp = Blueprint('auth', __name__)
books_bp = Blueprint('books', __name__)
recipes_bp = Blueprint('recipes', __name__)
versions_bp = Blueprint('versions', __name__)
# Import routes to register them with the blueprints
from . import auth
from . import books
from . import recipes
from . import versions
