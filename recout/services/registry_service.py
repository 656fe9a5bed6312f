# ==============================================================================
# SERVICIO DE REGISTRO - Validaciones de quien llama a los repositorios
# ==============================================================================
# Los repositorios NO validan ni controlan duplicados. Este servicio hace
# las comprobaciones de los formularios de alta antes de llamar a add():
#   - Funcionario: CPF, nombre o login duplicado
#   - Cliente: documento o nombre duplicado
#   - Producto: campos obligatorios y código secuencial
#   - Sector: nombre duplicado (solo al crear, no al renombrar)
#
# Saltarse este servicio y llamar directo al repositorio permite
# duplicados; ese es el contrato actual.
# ==============================================================================

import logging
import re
from typing import Callable, Optional

from recout.models import Client, Employee, Product, Sector
from recout.repositories import (
    ClientRepository,
    EmployeeRepository,
    ProductRepository,
    SectorRepository,
)
from recout.services.production_service import now_ms

logger = logging.getLogger(__name__)

FIRST_PRODUCT_CODE = 1001


class ValidationError(ValueError):
    """Datos de alta inválidos."""
    pass


class DuplicateRecordError(ValidationError):
    """Ya existe un registro con el mismo documento, nombre o login."""
    pass


def _same(a: Optional[str], b: Optional[str]) -> bool:
    return bool(a) and bool(b) and a.strip().lower() == b.strip().lower()


def _required(**fields) -> None:
    missing = [name for name, value in fields.items() if not (value or '').strip()]
    if missing:
        raise ValidationError(f"Campos obligatorios: {', '.join(missing)}")


class RegistryService:
    """
    Altas con validación sobre los repositorios de entidades.

    Los ids nuevos salen del reloj (milisegundos); si chocan se incrementan.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        clients: ClientRepository,
        products: ProductRepository,
        sectors: SectorRepository,
        clock: Callable[[], int] = now_ms,
    ):
        self.employees = employees
        self.clients = clients
        self.products = products
        self.sectors = sectors
        self.clock = clock

    @property
    def lock(self):
        """Comprobar duplicados y agregar ocurre bajo el mismo lock del store."""
        return self.employees.store.lock

    def _new_id(self, repo) -> int:
        new_id = self.clock()
        taken = {item.id for item in repo.get_all()}
        while new_id in taken:
            new_id += 1
        return new_id

    # =========================================================================
    # FUNCIONARIOS
    # =========================================================================

    def register_employee(
        self,
        name: str,
        username: str,
        password: str,
        cpf: str = '',
        sector: str = 'Triagem',
        avatar: Optional[str] = None,
    ) -> Employee:
        """
        Registra un funcionario con login.

        Raises:
            ValidationError: Si faltan datos
            DuplicateRecordError: Si hay CPF/nombre/login repetido
        """
        _required(name=name, username=username, password=password)
        with self.lock:
            self.employees.store.load()
            for existing in self.employees.get_all():
                if (cpf and existing.cpf == cpf) or _same(existing.name, name) \
                        or _same(existing.username, username):
                    raise DuplicateRecordError(
                        "Ya existe un funcionario con este CPF, nombre o usuario"
                    )

            # la contraseña se guarda tal cual: el login la compara exacta
            employee = Employee(
                id=self._new_id(self.employees),
                name=name.strip(),
                sector=sector,
                avatar=avatar,
                cpf=cpf or None,
                status='Offline',
                daily_production_base=0,
                username=username.strip(),
                password=password,
            )
            self.employees.add(employee)
        return employee

    # =========================================================================
    # CLIENTES
    # =========================================================================

    def register_client(
        self,
        name: str,
        doc: str,
        contact: str = '',
        email: str = '',
        address: str = '',
    ) -> Client:
        _required(name=name, doc=doc)
        with self.lock:
            self.clients.store.load()
            for existing in self.clients.get_all():
                if existing.doc == doc or _same(existing.name, name):
                    raise DuplicateRecordError("Ya existe un cliente con este documento o nombre")

            client = Client(
                id=self._new_id(self.clients),
                name=name.strip(),
                doc=doc,
                contact=contact,
                email=email,
                address=address,
            )
            self.clients.add(client)
        return client

    # =========================================================================
    # PRODUCTOS
    # =========================================================================

    def next_product_code(self) -> str:
        """
        Siguiente código legible: el mayor código numérico + 1.

        Se ignoran los caracteres no numéricos; si no hay ningún código
        numérico se empieza en 1001.
        """
        highest = 0
        for product in self.products.get_all():
            digits = re.sub(r'\D', '', product.code or '')
            if digits and int(digits) > highest:
                highest = int(digits)
        return str(highest + 1 if highest > 0 else FIRST_PRODUCT_CODE)

    def register_product(self, name: str, client: str, sector: str) -> Product:
        _required(name=name, client=client, sector=sector)
        with self.lock:
            # recargar para que el código no choque con productos de otra instancia
            self.products.store.load()
            product = Product(
                id=self._new_id(self.products),
                name=name.strip(),
                code=self.next_product_code(),
                client=client,
                sector=sector,
            )
            self.products.add(product)
        return product

    # =========================================================================
    # SECTORES
    # =========================================================================

    def create_sector(self, name: str, manager: str, description: str = '') -> Sector:
        _required(name=name, manager=manager)
        with self.lock:
            self.sectors.store.load()
            if any(_same(s.name, name) for s in self.sectors.get_all()):
                raise DuplicateRecordError("Ya existe un sector con este nombre")

            sector = Sector(
                id=self._new_id(self.sectors),
                name=name.strip(),
                manager=manager,
                description=description,
            )
            self.sectors.add(sector)
        return sector

    def update_sector(self, sector_id: int, name: str, manager: str, description: str = '') -> Sector:
        """Edita un sector. No se controla que el nuevo nombre sea único."""
        _required(name=name, manager=manager)
        sector = Sector(id=sector_id, name=name.strip(), manager=manager, description=description)
        self.sectors.update(sector)
        return sector
