# ==============================================================================
# CAPA DE MODELOS - Estructuras de datos del sistema
# ==============================================================================
# Entidades del dominio como dataclasses, independientes del mecanismo de
# persistencia (snapshot JSON).
# ==============================================================================

from .entities import (
    # Personas
    Employee,
    Client,

    # Catálogo
    Product,
    Sector,

    # Producción
    ProductionEntry,
    ProductionSession,
    ProductionStatus,
    ProductionState,
)

__all__ = [
    'Employee',
    'Client',
    'Product',
    'Sector',
    'ProductionEntry',
    'ProductionSession',
    'ProductionStatus',
    'ProductionState',
]
