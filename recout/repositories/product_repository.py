# ==============================================================================
# REPOSITORIO DE PRODUCTOS
# ==============================================================================

from typing import List, Optional

from recout.models import Product
from recout.repositories.base import CollectionRepository


class ProductRepository(CollectionRepository):
    """Repositorio de piezas registradas."""

    collection = 'products'

    def get_all(self) -> List[Product]:
        return self.store.products

    def find_by_code(self, code: str) -> Optional[Product]:
        for product in self.store.products:
            if product.code == code:
                return product
        return None
