from .auth_service import AuthContext, AuthService, current_auth
from .book_service import BookService
from .recipe_service import RecipeService
from .version_service import VersionService

__all__ = ['AuthContext', 'AuthService', 'current_auth', 'BookService', 'RecipeService', 'VersionService']
