# ==============================================================================
# CAPA DE REPOSITORIOS - Acceso a datos
# ==============================================================================
# Encapsula todo el acceso al snapshot JSON.
#
# ESTRUCTURA:
# ├── base.py                  → SnapshotStore (load/save) y CollectionRepository
# ├── employee_repository.py   → colección 'employees'
# ├── client_repository.py     → colección 'clients'
# ├── product_repository.py    → colección 'products'
# ├── sector_repository.py     → colección 'sectors'
# ├── production_repository.py → colección 'production' (ledger)
# └── session_repository.py    → production_session.json
# ==============================================================================

from .base import (
    BaseRepository,
    CollectionRepository,
    SnapshotStore,
    SNAPSHOT_FILENAME,
    default_employees,
    default_sectors,
)
from .employee_repository import EmployeeRepository
from .client_repository import ClientRepository
from .product_repository import ProductRepository
from .sector_repository import SectorRepository
from .production_repository import ProductionRepository
from .session_repository import SessionRepository, SESSION_FILENAME

__all__ = [
    'BaseRepository',
    'CollectionRepository',
    'SnapshotStore',
    'SNAPSHOT_FILENAME',
    'default_employees',
    'default_sectors',
    'EmployeeRepository',
    'ClientRepository',
    'ProductRepository',
    'SectorRepository',
    'ProductionRepository',
    'SessionRepository',
    'SESSION_FILENAME',
]
