import pytest

from spewn import create_app, db
from spewn.models.user import User

PASSWORD = 'Sup3rSecret!'


@pytest.fixture
def app():
    """
    App bound to a fresh in-memory SQLite database.
    """
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'MAIL_SERVER': None,
    })
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    """
    Test client logged in as a freshly registered user.
    """
    resp = client.post('/api/auth/register', json={
        'email': 'asha@example.com',
        'password': PASSWORD,
        'name': 'Asha',
    })
    assert resp.status_code == 201
    return client


@pytest.fixture
def app_ctx(app):
    """
    Pushes an app context for tests that call the budget functions directly.
    Do not combine with the test client.
    """
    with app.app_context():
        yield


@pytest.fixture
def user(app_ctx):
    u = User(email='ravi@example.com', name='Ravi')
    u.set_password(PASSWORD)
    db.session.add(u)
    db.session.commit()
    return u


def get_user(app, email='asha@example.com'):
    """Fresh copy of a user row, read outside any request."""
    with app.app_context():
        u = User.query.filter_by(email=email).one()
        db.session.expunge(u)
        return u
