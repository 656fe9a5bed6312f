import os
import sys

import pytest

# ensure project root is on sys.path when running from tests/ folder
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..')))

from recout.app_container import AppContainer
from recout.main import create_app
from recout.models import Employee, Product
from recout.repositories import SessionRepository, SnapshotStore, SNAPSHOT_FILENAME


class FakeClock:
    """Reloj controlable en milisegundos epoch."""

    def __init__(self, start=1_760_000_000_000):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += int(seconds * 1000)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store_path(tmp_path):
    return str(tmp_path / SNAPSHOT_FILENAME)


@pytest.fixture
def store(store_path):
    return SnapshotStore(store_path)


@pytest.fixture
def session_repo(tmp_path):
    return SessionRepository(str(tmp_path))


@pytest.fixture
def alice():
    return Employee(id=10, name='Alice', sector='Corte', username='alice', password='a1')


@pytest.fixture
def bob():
    return Employee(id=11, name='Bob', sector='Costura', username='bob', password='b1')


@pytest.fixture
def part():
    return Product(id=1, name='Camiseta Polo', code='1001', client='Malharia Sul', sector='Triagem')


@pytest.fixture
def container(tmp_path):
    return AppContainer(data_dir=str(tmp_path / 'data'))


@pytest.fixture
def app(tmp_path, container):
    return create_app(
        {'TESTING': True, 'LOGS_DIR': str(tmp_path / 'logs'), 'PROFILING': True},
        container=container,
    )


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
