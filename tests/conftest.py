import pytest
from flask_jwt_extended import create_access_token, create_refresh_token

from recipe_hub import create_app
from recipe_hub.extensions import db
from recipe_hub.services import AuthContext

TEST_CONFIG = {
    'TESTING': True,
    'SQLALCHEMY_DATABASE_URI': 'sqlite://',
    'JWT_SECRET_KEY': 'test-secret-key-that-is-long-enough',
    'JWT_ALGORITHM': 'HS256',
    'JWT_DECODE_AUDIENCE': None,
    'JWT_DECODE_ISSUER': None,
    'CACHE_TYPE': 'SimpleCache',
    'AUTO_CREATE_TABLES': False,
    'VERSION_WRITE_RETRIES': 3,
}

RECIPE = {
    'name': 'Pancakes',
    'description': 'Fluffy breakfast pancakes',
    'cookTime': '20 min',
    'servings': 4,
    'ingredients': [
        {'amount': 1, 'metric': 'cup', 'name': 'Milk'},
        {'amount': '1/2', 'metric': 'tsp', 'name': 'Salt'},
        '2 eggs',
    ],
    'instructions': ['Mix everything', 'Cook on a hot pan'],
    'originalSource': 'Grandma',
}


@pytest.fixture
def app():
    app = create_app(TEST_CONFIG)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_headers(app):
    def _make(user_id='user-1', refresh=False, **claims):
        if refresh:
            token = create_refresh_token(identity=user_id, additional_claims=claims)
        else:
            token = create_access_token(identity=user_id, additional_claims=claims)
        return {'Authorization': f'Bearer {token}'}
    return _make


@pytest.fixture
def headers(make_headers):
    return make_headers('user-1', email='cook@example.com', name='Ada Cook')


@pytest.fixture
def other_headers(make_headers):
    return make_headers('user-2', email='other@example.com')


@pytest.fixture
def auth(app):
    return AuthContext(user_id='user-1', email='cook@example.com', name='Ada Cook')


@pytest.fixture
def book(client, headers):
    res = client.post('/api/books', json={
        'name': 'Breakfast', 'description': 'Morning food', 'image': '🥞'
    }, headers=headers)
    assert res.status_code == 201
    return res.get_json()['book']


@pytest.fixture
def recipe(client, headers, book):
    res = client.post('/api/recipes', json=dict(RECIPE, bookId=book['id']), headers=headers)
    assert res.status_code == 201
    return res.get_json()['recipe']
