"""Small HTTP client for the Recipe Hub API.

Every call carries the bearer token. When the server answers 401 the client
asks ``token_refresher`` for a new token once and replays the request.
"""
import logging

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RecipeHubClient:
    def __init__(self, base_url, token, token_refresher=None, transport=None, timeout=15):
        self.token = token
        self.token_refresher = token_refresher
        self._http = httpx.Client(base_url=base_url.rstrip('/') + '/api', transport=transport, timeout=timeout)

    def close(self):
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _send(self, method, path, **kwargs):
        headers = {'Authorization': f'Bearer {self.token}'}
        try:
            return self._http.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException:
            raise ApiError(f'Request to {path} timed out.')
        except httpx.TransportError as e:
            raise ApiError(f'Could not reach the API: {e}')

    def _refresh(self):
        if self.token_refresher is None:
            return False
        try:
            token = self.token_refresher()
        except Exception as e:
            raise ApiError(f'Token refresh failed: {e}', status_code=401) from e
        if not token:
            return False
        self.token = token
        logger.info('Access token refreshed')
        return True

    def request(self, method, path, **kwargs):
        response = self._send(method, path, **kwargs)
        if response.status_code == 401 and self._refresh():
            response = self._send(method, path, **kwargs)

        if response.status_code >= 400:
            try:
                message = response.json().get('error')
            except ValueError:
                message = None
            raise ApiError(message or f'HTTP {response.status_code} error for {path}', response.status_code)
        return response.json()

    # Books

    def list_books(self):
        return self.request('GET', '/books')

    def book_recipes(self, book_id):
        return self.request('GET', f'/books/{book_id}')

    def create_book(self, name, description, image):
        return self.request('POST', '/books', json={'name': name, 'description': description, 'image': image})

    def update_book(self, book_id, name, description, image):
        return self.request('PUT', f'/books/{book_id}',
                            json={'name': name, 'description': description, 'image': image})

    def delete_book(self, book_id):
        return self.request('DELETE', f'/books/{book_id}')

    # Recipes

    def list_recipes(self, limit=None):
        params = {'limit': limit} if limit else None
        return self.request('GET', '/recipes', params=params)

    def search_recipes(self, query):
        return self.request('GET', '/recipes/search', params={'q': query})

    def get_recipe(self, recipe_id):
        return self.request('GET', f'/recipes/{recipe_id}')

    def display_recipe(self, recipe_id, multiplier=1, system=None):
        params = {'multiplier': multiplier}
        if system:
            params['system'] = system
        return self.request('GET', f'/recipes/{recipe_id}/display', params=params)

    def create_recipe(self, recipe):
        return self.request('POST', '/recipes', json=recipe)

    def update_recipe(self, recipe_id, updates, version_notes=None):
        payload = dict(updates)
        if version_notes:
            payload['versionNotes'] = version_notes
        return self.request('PUT', f'/recipes/{recipe_id}', json=payload)

    def delete_recipe(self, recipe_id):
        return self.request('DELETE', f'/recipes/{recipe_id}')

    # Versions

    def recipe_versions(self, recipe_id):
        return self.request('GET', f'/versions/recipe/{recipe_id}')

    def get_version(self, version_id):
        return self.request('GET', f'/versions/{version_id}')

    def compare_versions(self, recipe_id, v1, v2):
        return self.request('GET', f'/versions/compare/{recipe_id}/{v1}/{v2}')

    def diff_versions(self, recipe_id, v1, v2):
        return self.request('GET', f'/versions/diff/{recipe_id}/{v1}/{v2}')
