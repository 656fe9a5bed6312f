"""Recout: registro de producción del chão de fábrica.

Núcleo de persistencia (snapshot JSON con recarga antes de escribir),
máquina de estados de producción por operador y estadísticas derivadas.
"""

__version__ = '1.0.0'
