# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS - Inyección de servicios
# ==============================================================================
# Un único SnapshotStore explícito se comparte entre todos los repositorios
# y servicios. Nada depende de estado global del módulo: cada contenedor
# tiene su propio store, lo que permite tests aislados con tmp_path.
# ==============================================================================

import logging
import os
from typing import Optional

from recout.repositories import (
    ClientRepository,
    EmployeeRepository,
    ProductRepository,
    ProductionRepository,
    SectorRepository,
    SessionRepository,
    SnapshotStore,
    SNAPSHOT_FILENAME,
)
from recout.services import (
    AuthService,
    ProductionService,
    RecoveryService,
    RegistryService,
    StatsService,
)
from recout.services.recovery_service import DEFAULT_MODEL

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data')


class AppContainer:
    """
    Contenedor de dependencias de la aplicación.

    Uso:
        container = AppContainer(data_dir='/path/to/data')
        container.auth_service.login('admin', '123')
        container.production_service.restore(container.auth_service.get_current_user())
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        gemini_api_key: Optional[str] = None,
        gemini_model: str = DEFAULT_MODEL,
    ):
        """
        Args:
            data_dir: Carpeta donde viven los JSON
            gemini_api_key: API key del servicio de recuperación (opcional)
            gemini_model: Modelo usado por el servicio de recuperación
        """
        self.data_dir = data_dir or DEFAULT_DATA_DIR
        self.gemini_api_key = gemini_api_key
        self.gemini_model = gemini_model

        self._store: Optional[SnapshotStore] = None
        self._session_repo: Optional[SessionRepository] = None
        self._auth_service: Optional[AuthService] = None
        self._production_service: Optional[ProductionService] = None
        self._stats_service: Optional[StatsService] = None
        self._registry_service: Optional[RegistryService] = None
        self._recovery_service: Optional[RecoveryService] = None

    # =========================================================================
    # PERSISTENCIA
    # =========================================================================

    @property
    def store(self) -> SnapshotStore:
        if self._store is None:
            path = os.path.join(self.data_dir, SNAPSHOT_FILENAME)
            self._store = SnapshotStore(path)
            logger.info("Snapshot en %s", path)
        return self._store

    @property
    def session_repo(self) -> SessionRepository:
        if self._session_repo is None:
            self._session_repo = SessionRepository(self.data_dir)
        return self._session_repo

    @property
    def employees(self) -> EmployeeRepository:
        return EmployeeRepository(self.store)

    @property
    def clients(self) -> ClientRepository:
        return ClientRepository(self.store)

    @property
    def products(self) -> ProductRepository:
        return ProductRepository(self.store)

    @property
    def sectors(self) -> SectorRepository:
        return SectorRepository(self.store)

    @property
    def production(self) -> ProductionRepository:
        return ProductionRepository(self.store)

    # =========================================================================
    # SERVICIOS
    # =========================================================================

    @property
    def auth_service(self) -> AuthService:
        if self._auth_service is None:
            self._auth_service = AuthService(self.store, self.session_repo)
        return self._auth_service

    @property
    def production_service(self) -> ProductionService:
        """Slot único de producción (restaurado para el usuario actual)."""
        if self._production_service is None:
            self._production_service = ProductionService(
                self.production,
                self.products,
                self.session_repo,
            )
            self._production_service.restore(self.store.current_user)
        return self._production_service

    @property
    def stats_service(self) -> StatsService:
        if self._stats_service is None:
            self._stats_service = StatsService(self.store)
        return self._stats_service

    @property
    def registry_service(self) -> RegistryService:
        if self._registry_service is None:
            self._registry_service = RegistryService(
                self.employees,
                self.clients,
                self.products,
                self.sectors,
            )
        return self._registry_service

    @property
    def recovery_service(self) -> RecoveryService:
        if self._recovery_service is None:
            self._recovery_service = RecoveryService(self.gemini_api_key, self.gemini_model)
        return self._recovery_service
