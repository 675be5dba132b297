import httpx
import pytest

from recipe_hub.client import ApiError, RecipeHubClient

from .conftest import RECIPE


def _client(handler, token='old-token', refresher=None):
    return RecipeHubClient('http://recipes.test', token, token_refresher=refresher,
                           transport=httpx.MockTransport(handler))


def test_sends_bearer_token():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=[])

    assert _client(handler).list_books() == []
    assert seen[0].headers['Authorization'] == 'Bearer old-token'
    assert seen[0].url.path == '/api/books'


def test_refreshes_once_on_401():
    tokens = []

    def handler(request):
        tokens.append(request.headers['Authorization'])
        if request.headers['Authorization'] == 'Bearer old-token':
            return httpx.Response(401, json={'error': 'Token has expired'})
        return httpx.Response(200, json={'id': 'r1'})

    client = _client(handler, refresher=lambda: 'new-token')
    assert client.get_recipe('r1') == {'id': 'r1'}
    assert tokens == ['Bearer old-token', 'Bearer new-token']
    assert client.token == 'new-token'


def test_second_401_raises():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(401, json={'error': 'Token has expired'})

    with pytest.raises(ApiError) as excinfo:
        _client(handler, refresher=lambda: 'still-bad').list_recipes()
    assert excinfo.value.status_code == 401
    assert len(calls) == 2


def test_refresher_failure_raises():
    def handler(request):
        return httpx.Response(401, json={'error': 'Token has expired'})

    def broken_refresher():
        raise RuntimeError('provider down')

    with pytest.raises(ApiError, match='Token refresh failed'):
        _client(handler, refresher=broken_refresher).list_books()


def test_server_error_message_is_surfaced():
    def handler(request):
        return httpx.Response(404, json={'error': 'Recipe not found'})

    with pytest.raises(ApiError, match='Recipe not found') as excinfo:
        _client(handler).get_recipe('missing')
    assert excinfo.value.status_code == 404


def test_update_sends_version_notes():
    bodies = []

    def handler(request):
        bodies.append(request.read())
        return httpx.Response(200, json={'message': 'Recipe updated successfully'})

    _client(handler).update_recipe('r1', {'servings': 3}, version_notes='Smaller batch')
    assert b'"versionNotes"' in bodies[0]
    assert b'"Smaller batch"' in bodies[0]


def test_against_the_app(app, make_headers):
    token = make_headers('user-1', name='Ada')['Authorization'].split(' ', 1)[1]
    transport = httpx.WSGITransport(app=app)
    with RecipeHubClient('http://recipes.test', token, transport=transport) as client:
        book = client.create_book('Soups', 'Warm bowls', '🥣')['book']
        recipe_id = client.create_recipe(dict(RECIPE, bookId=book['id']))['id']
        client.update_recipe(recipe_id, {'name': 'Pancake stack'}, version_notes='Renamed')

        versions = client.recipe_versions(recipe_id)
        assert [v['version'] for v in versions] == [2, 1]
        assert versions[0]['notes'] == 'Renamed'

        diff = client.diff_versions(recipe_id, 1, 2)
        assert diff['stats']['changes'] == 1
