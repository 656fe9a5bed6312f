# ==============================================================================
# REPOSITORIO DE LA SESIÓN DE PRODUCCIÓN
# ==============================================================================
# Guarda la ÚNICA ProductionSession del proceso en production_session.json
# para que un trabajo en curso sobreviva a un reinicio. No forma parte del
# ledger: el último en escribir gana.
# ==============================================================================

import logging
import os
from typing import Optional

from recout.models import ProductionSession
from recout.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

SESSION_FILENAME = 'production_session.json'


class SessionRepository(BaseRepository):
    """Slot persistido de la sesión de producción."""

    def __init__(self, base_path: str):
        super().__init__(os.path.join(base_path, SESSION_FILENAME))

    def load(self) -> Optional[ProductionSession]:
        data = self._read_raw()
        if not isinstance(data, dict):
            return None
        try:
            return ProductionSession.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.error("Sesión de producción malformada: %s", e)
            return None

    def save(self, session: ProductionSession) -> bool:
        return self._write_raw(session.to_dict())

    def clear(self) -> bool:
        return self._write_raw(None)
