# ==============================================================================
# REPOSITORIO DE FUNCIONARIOS
# ==============================================================================
# Colección 'employees' del snapshot. Username y CPF deberían ser únicos,
# pero este repositorio NO lo verifica (ver RegistryService).
# ==============================================================================

from typing import List, Optional

from recout.models import Employee
from recout.repositories.base import CollectionRepository


class EmployeeRepository(CollectionRepository):
    """Repositorio de funcionarios."""

    collection = 'employees'

    def get_all(self) -> List[Employee]:
        return self.store.employees

    def find_by_name(self, name: str) -> Optional[Employee]:
        """Primer funcionario con ese nombre exacto (las referencias son por nombre)."""
        for employee in self.store.employees:
            if employee.name == name:
                return employee
        return None

    def find_by_username(self, username: str) -> Optional[Employee]:
        """
        Busca por login sin distinguir mayúsculas ni espacios.

        Args:
            username: Login ingresado

        Returns:
            Funcionario o None
        """
        wanted = (username or '').strip().lower()
        for employee in self.store.employees:
            if employee.username and employee.username.strip().lower() == wanted:
                return employee
        return None
