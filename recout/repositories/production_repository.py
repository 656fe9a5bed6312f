# ==============================================================================
# REPOSITORIO DEL LEDGER DE PRODUCCIÓN
# ==============================================================================
# Las entradas se agregan al iniciar un trabajo y se marcan 'finished' al
# avanzar de sector. Nunca se eliminan: son el registro histórico usado por
# las estadísticas.
# ==============================================================================

import logging
from typing import List

from recout.models import ProductionEntry, ProductionStatus
from recout.repositories.base import CollectionRepository

logger = logging.getLogger(__name__)


class ProductionRepository(CollectionRepository):
    """Repositorio del ledger de producción."""

    collection = 'production'

    def get_all(self) -> List[ProductionEntry]:
        return self.store.production

    def start(self, entry: ProductionEntry) -> None:
        """Registra un trabajo nuevo (status 'working')."""
        self.add(entry)

    def update_sector(self, process_id: str, sector: str) -> bool:
        """
        Mueve a otro sector la entrada con ese id/código.

        Se prefiere la entrada 'working' más reciente; si no hay ninguna en
        curso, la más reciente con ese código.

        Returns:
            True si se encontró la entrada
        """
        with self.store.lock:
            self.store.load()
            matches = [e for e in self.store.production
                       if e.id == process_id or e.part_code == process_id]
            if not matches:
                return False
            working = [e for e in matches if e.status == ProductionStatus.WORKING]
            entry = (working or matches)[-1]
            entry.current_sector = sector
            self.store.save()
        return True

    def finish(self, process_id: str) -> bool:
        """
        Marca como 'finished' la entrada 'working' más reciente con ese id.

        Returns:
            True si había una entrada en curso
        """
        with self.store.lock:
            self.store.load()
            for entry in reversed(self.store.production):
                if (entry.id == process_id or entry.part_code == process_id) \
                        and entry.status == ProductionStatus.WORKING:
                    entry.status = ProductionStatus.FINISHED
                    self.store.save()
                    logger.info("Producción finalizada: %s", process_id)
                    return True
        logger.warning("No hay producción en curso para %s", process_id)
        return False
