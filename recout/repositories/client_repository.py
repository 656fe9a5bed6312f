# ==============================================================================
# REPOSITORIO DE CLIENTES
# ==============================================================================

from typing import List

from recout.models import Client
from recout.repositories.base import CollectionRepository


class ClientRepository(CollectionRepository):
    """Repositorio de clientes (sin control de documento duplicado)."""

    collection = 'clients'

    def get_all(self) -> List[Client]:
        return self.store.clients
