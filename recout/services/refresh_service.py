# ==============================================================================
# REFRESCO PERIÓDICO DEL PANEL
# ==============================================================================
# Recalcula las estadísticas cada ~1 segundo y entrega el resultado a un
# callback. Tiene ciclo de vida explícito: start() al abrir la vista,
# stop() al cerrarla. Después de stop() no se ejecuta ningún refresco más.
#
# Solo lectura: nunca escribe en el snapshot.
#
# Consumidor: GET /api/dashboard/stream (main.py) abre un refresher por
# conexión y lo detiene al cerrarse el stream.
# ==============================================================================

import logging
import threading
from typing import Any, Callable, Dict, Optional

from recout.services.stats_service import StatsService

logger = logging.getLogger(__name__)


class DashboardRefresher:
    """
    Tarea periódica cancelable ligada a una vista.

    Uso:
        with DashboardRefresher(stats, on_update) as refresher:
            ...  # la vista está activa
        # al salir del bloque ya no hay refrescos
    """

    DEFAULT_INTERVAL = 1.0

    def __init__(
        self,
        stats: StatsService,
        callback: Callable[[Dict[str, Any]], None],
        interval: float = DEFAULT_INTERVAL,
    ):
        self.stats = stats
        self.callback = callback
        self.interval = interval
        self._stop_event = threading.Event()
        self._lock = threading.RLock()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def refresh_once(self) -> None:
        """Un refresco inmediato (también se llama al arrancar)."""
        with self._lock:
            if self._stop_event.is_set():
                return
            snapshot = self.stats.dashboard_snapshot()
            self.callback(snapshot)

    def _loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.refresh_once()
            except Exception:
                logger.exception("Error en el refresco del panel")
            if self._stop_event.wait(self.interval):
                break

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name='dashboard-refresh', daemon=True)
        self._thread.start()
        logger.debug("Refresco del panel iniciado (%.2fs)", self.interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        """
        Cancela la tarea y espera a que termine.

        Al volver, ningún callback está en curso ni se ejecutará otro.
        """
        self._stop_event.set()
        # Espera a un refresco que ya estuviera en curso
        with self._lock:
            pass
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout if timeout is not None else self.interval + 1.0)
        self._thread = None
        logger.debug("Refresco del panel detenido")

    def __enter__(self) -> 'DashboardRefresher':
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
