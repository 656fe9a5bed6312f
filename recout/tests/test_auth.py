from werkzeug.security import generate_password_hash

from recout.models import Employee, ProductionSession
from recout.repositories import EmployeeRepository, SnapshotStore
from recout.services import AuthService


def test_login_seeded_admin_succeeds_and_persists(store, session_repo):
    auth = AuthService(store, session_repo)

    assert auth.login('admin', '123') is True
    assert auth.get_current_user().name == 'Administrador'
    assert SnapshotStore(store.file_path).current_user.username == 'admin'


def test_login_wrong_password_leaves_user_unset(store, session_repo):
    auth = AuthService(store, session_repo)

    assert auth.login('admin', 'wrong') is False
    assert auth.get_current_user() is None


def test_login_unknown_user_fails(store, session_repo):
    assert AuthService(store, session_repo).login('ghost', '123') is False


def test_username_is_case_insensitive_password_is_not(store, session_repo):
    auth = AuthService(store, session_repo)

    assert auth.login('  ADMIN ', '123') is True
    auth.logout()
    assert auth.login('admin', '123 ') is False


def test_login_sees_employee_registered_elsewhere(store_path, session_repo):
    auth = AuthService(SnapshotStore(store_path), session_repo)
    EmployeeRepository(SnapshotStore(store_path)).add(
        Employee(id=5, name='Carlos', sector='Corte', username='carlos', password='c0')
    )

    assert auth.login('carlos', 'c0') is True


def test_login_with_hashed_password(store, session_repo):
    EmployeeRepository(store).add(Employee(
        id=6, name='Fernanda', username='fernanda',
        password=generate_password_hash('s3cret'),
    ))
    auth = AuthService(store, session_repo)

    assert auth.login('fernanda', 's3cret') is True
    auth.logout()
    assert auth.login('fernanda', 'other') is False


def test_logout_clears_user_and_production_session(store, session_repo):
    auth = AuthService(store, session_repo)
    auth.login('admin', '123')
    session_repo.save(ProductionSession(employee_name='Administrador', process_id='1001', is_running=True))

    auth.logout()

    assert auth.get_current_user() is None
    assert session_repo.load() is None
    assert SnapshotStore(store.file_path).current_user is None
