# ==============================================================================
# REPOSITORIO DE SECTORES
# ==============================================================================
# El nombre del sector es la clave usada por funcionarios, productos y
# ledger. Renombrar un sector NO actualiza esas referencias.
# ==============================================================================

import logging
from typing import List

from recout.models import Sector
from recout.repositories.base import CollectionRepository

logger = logging.getLogger(__name__)


class SectorRepository(CollectionRepository):
    """Repositorio de sectores; además de add/remove permite update."""

    collection = 'sectors'

    def get_all(self) -> List[Sector]:
        return self.store.sectors

    def get_names(self) -> List[str]:
        return [s.name for s in self.store.sectors]

    def update(self, sector: Sector) -> None:
        """
        Reemplaza el sector con el mismo id.

        Args:
            sector: Sector con los datos nuevos (id existente)
        """
        with self.store.lock:
            self.store.load()
            self.store.sectors = [sector if s.id == sector.id else s for s in self.store.sectors]
            self.store.save()
        logger.info("sectors: actualizado id=%s", sector.id)
