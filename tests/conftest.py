import pytest

from config import Config
from index import create_app
from settlement import ExpenseEntry, Participant


class TestConfig(Config):
    TESTING = True
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = ['http://localhost:5173']


@pytest.fixture
def app():
    return create_app(TestConfig)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def trio():
    return [Participant("A", "Ann"), Participant("B", "Bob"), Participant("C", "Cat")]


@pytest.fixture
def dinner():
    # A paid 30 for all three
    return [ExpenseEntry("e1", 30, "A", ["A", "B", "C"], description="Dinner")]
