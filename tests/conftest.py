import pytest

from tests.helpers import InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()
