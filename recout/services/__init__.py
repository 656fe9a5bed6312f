# ==============================================================================
# CAPA DE SERVICIOS - Lógica de negocio
# ==============================================================================
# PRINCIPIOS:
# 1. Los servicios orquestan operaciones entre repositorios
# 2. Las validaciones de alta están en RegistryService, NO en repositorios
# 3. Las rutas (main.py) solo llaman a servicios
#
# ESTRUCTURA:
# ├── auth_service.py       → login/logout, usuario actual
# ├── production_service.py → máquina de estados del operador
# ├── stats_service.py      → conteos diarios/mensuales, ocupación de sectores
# ├── refresh_service.py    → refresco periódico del panel
# ├── registry_service.py   → altas con control de duplicados
# └── recovery_service.py   → cliente del servicio LLM externo
# ==============================================================================

from recout.services.auth_service import AuthService
from recout.services.production_service import ProductionService, format_elapsed, now_ms
from recout.services.stats_service import StatsService, SectorOccupancy
from recout.services.refresh_service import DashboardRefresher
from recout.services.registry_service import DuplicateRecordError, RegistryService, ValidationError
from recout.services.recovery_service import RecoveryService, RecoveryServiceError

__all__ = [
    'AuthService',
    'ProductionService',
    'format_elapsed',
    'now_ms',
    'StatsService',
    'SectorOccupancy',
    'DashboardRefresher',
    'RegistryService',
    'ValidationError',
    'DuplicateRecordError',
    'RecoveryService',
    'RecoveryServiceError',
]
