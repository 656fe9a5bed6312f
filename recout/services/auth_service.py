# ==============================================================================
# SERVICIO DE AUTENTICACIÓN
# ==============================================================================
# Resuelve credenciales contra la colección de funcionarios y mantiene el
# puntero al usuario actual, que se persiste en el snapshot para que un
# reinicio no cierre la sesión del operador.
#
# El login solo devuelve True/False: ningún detalle sobre si el usuario
# existe o si la contraseña falló.
# ==============================================================================

import logging
from typing import Optional

from werkzeug.security import check_password_hash

from recout.models import Employee
from recout.repositories import EmployeeRepository, SessionRepository, SnapshotStore

logger = logging.getLogger(__name__)

HASH_PREFIXES = ('pbkdf2:', 'scrypt:')


def password_matches(stored: Optional[str], password: Optional[str]) -> bool:
    """
    Compara una contraseña contra la almacenada.

    Soporta tanto hash de werkzeug como texto plano (legacy, p. ej. el
    administrador sembrado).
    """
    if not stored or password is None:
        return False
    if stored.startswith(HASH_PREFIXES):
        return check_password_hash(stored, password)
    return stored == password


class AuthService:
    """
    Servicio de sesión del operador.

    Uso:
        auth = AuthService(store, session_repo)
        if auth.login('admin', '123'):
            user = auth.get_current_user()
    """

    def __init__(self, store: SnapshotStore, session_repo: SessionRepository):
        self.store = store
        self.employees = EmployeeRepository(store)
        self.session_repo = session_repo

    def login(self, username: str, password: str) -> bool:
        """
        Autentica un funcionario.

        Recarga el snapshot primero para ver funcionarios registrados por
        otra instancia.

        Args:
            username: Login (sin distinguir mayúsculas)
            password: Contraseña en texto plano

        Returns:
            True si las credenciales son válidas
        """
        with self.store.lock:
            self.store.load()
            employee = self.employees.find_by_username(username)
            if employee is None or not password_matches(employee.password, password):
                logger.info("Intento de login fallido")
                return False

            self.store.current_user = employee
            self.store.save()
        logger.info("Inicio de sesión: %s", employee.username)
        return True

    def logout(self) -> None:
        """Cierra la sesión y descarta cualquier sesión de producción activa."""
        user = self.store.current_user
        with self.store.lock:
            self.store.load()
            self.store.current_user = None
            self.session_repo.clear()
            self.store.save()
        if user:
            logger.info("Cierre de sesión: %s", user.username)

    def get_current_user(self) -> Optional[Employee]:
        """Usuario actual tal cual; None significa 'sin sesión'."""
        return self.store.current_user

    def is_authenticated(self) -> bool:
        return self.store.current_user is not None
