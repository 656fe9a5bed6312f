# ==============================================================================
# SERVICIO DE PRODUCCIÓN - Máquina de estados del operador
# ==============================================================================
# Estados:
#   IDLE     → sin processId
#   RUNNING  → processId asignado, entrada del ledger en 'working'
#   FINISHED → entrada del ledger en 'finished'; la sesión conserva sus
#              valores hasta reset()
#
# Transiciones:
#   start()          IDLE → RUNNING    (requiere pieza y cliente)
#   advance_sector() RUNNING → FINISHED
#   reset()          cualquier estado → IDLE (siempre funciona)
#
# Las transiciones ilegales NO lanzan excepciones: devuelven False y no
# cambian nada. Cada transición y cada edición de campos persiste la
# sesión completa en SessionRepository.
# ==============================================================================

import logging
import threading
import time
from functools import wraps
from typing import Callable, Optional

from recout.models import (
    Employee,
    Product,
    ProductionEntry,
    ProductionSession,
    ProductionState,
    ProductionStatus,
)
from recout.repositories import ProductionRepository, ProductRepository, SessionRepository

logger = logging.getLogger(__name__)


def now_ms() -> int:
    """Reloj por defecto: milisegundos epoch."""
    return int(time.time() * 1000)


def format_elapsed(total_seconds: int) -> str:
    """Formatea segundos como HH:MM:SS (negativos se muestran como 0)."""
    total_seconds = max(0, int(total_seconds))
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def synchronized(method):
    """Serializa los métodos del servicio (un slot compartido por los hilos de Flask)."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)
    return wrapper


class ProductionService:
    """
    Flujo de trabajo de producción de un operador.

    Hay un solo slot de sesión por proceso. El ledger se escribe solo desde
    aquí (start / advance_sector); reset() nunca borra entradas.

    Uso:
        production = ProductionService(ledger, products, session_repo)
        production.restore(current_user)
        production.select_part(product)
        production.start_selected()
        ...
        production.advance_sector('Costura')
        production.reset()
    """

    def __init__(
        self,
        ledger: ProductionRepository,
        products: ProductRepository,
        session_repo: SessionRepository,
        clock: Callable[[], int] = now_ms,
    ):
        self.ledger = ledger
        self.products = products
        self.session_repo = session_repo
        self.clock = clock
        self.current_user: Optional[Employee] = None
        self.session = ProductionSession()
        self._lock = threading.RLock()

    # =========================================================================
    # ESTADO
    # =========================================================================

    @property
    def state(self) -> ProductionState:
        if not self.session.process_id:
            return ProductionState.IDLE
        return self.session.state

    def _defaults(self) -> ProductionSession:
        """Sesión vacía bloqueada al usuario actual."""
        user = self.current_user
        if user is None:
            return ProductionSession()
        return ProductionSession(
            employee_name=user.name,
            current_sector=user.sector,
            selected_avatar=user.avatar,
        )

    def _persist(self) -> None:
        self.session_repo.save(self.session)

    @synchronized
    def restore(self, current_user: Optional[Employee]) -> ProductionState:
        """
        Restaura la sesión persistida si pertenece al usuario actual.

        Una sesión de otro funcionario se descarta: un operador nunca
        hereda el trabajo en curso de otro tras cambiar de login.

        Args:
            current_user: Funcionario autenticado (o None)

        Returns:
            Estado resultante
        """
        self.current_user = current_user
        self.session = self._defaults()

        saved = self.session_repo.load()
        if saved is None:
            return self.state

        if current_user is not None and saved.employee_name == current_user.name:
            self.session = saved
            logger.info("Sesión de producción restaurada para %s (%s)",
                        current_user.name, self.state.value)
        else:
            logger.info("Descartando sesión de producción de %s", saved.employee_name)
            self.session_repo.clear()
        return self.state

    # =========================================================================
    # EDICIÓN DE CAMPOS
    # =========================================================================

    @synchronized
    def select_part(self, part: Product) -> bool:
        """Selecciona la pieza (y su cliente). Solo en IDLE."""
        if self.state != ProductionState.IDLE:
            return False
        self.session.part_id = part.code
        self.session.part_name = part.name
        self.session.client_name = part.client
        self._persist()
        return True

    @synchronized
    def set_current_sector(self, sector: str) -> bool:
        if self.state != ProductionState.IDLE:
            return False
        self.session.current_sector = sector
        self._persist()
        return True

    @synchronized
    def set_next_sector(self, sector: str) -> bool:
        """El próximo sector se puede elegir también durante el trabajo."""
        if self.state == ProductionState.FINISHED:
            return False
        self.session.next_sector = sector
        self._persist()
        return True

    # =========================================================================
    # TRANSICIONES
    # =========================================================================

    @synchronized
    def start(
        self,
        part: Optional[Product],
        client: str,
        employee: str,
        sector: str,
        avatar: Optional[str] = None,
    ) -> bool:
        """
        Inicia un trabajo: IDLE → RUNNING.

        Crea la entrada del ledger en 'working' con id = código de la pieza.

        Returns:
            False si no hay pieza/cliente o si ya hay un trabajo abierto
        """
        if part is None or not client or self.state != ProductionState.IDLE:
            return False

        started = self.clock()
        session = self.session
        session.employee_name = employee
        session.client_name = client
        session.part_id = part.code
        session.part_name = part.name
        session.current_sector = sector
        session.selected_avatar = avatar
        session.process_id = part.code
        session.start_time = started
        session.stop_time = None
        session.is_running = True
        session.is_finished = False

        self.ledger.start(ProductionEntry(
            id=part.code,
            employee_name=employee,
            avatar=avatar,
            part_name=part.name,
            part_code=part.code,
            current_sector=sector,
            start_time=started,
            status=ProductionStatus.WORKING,
        ))
        self._persist()
        logger.info("Producción iniciada: %s por %s en %s", part.code, employee, sector)
        return True

    @synchronized
    def start_selected(self) -> bool:
        """Inicia con los valores ya elegidos en la sesión."""
        part = self.products.find_by_code(self.session.part_id) if self.session.part_id else None
        return self.start(
            part,
            self.session.client_name,
            self.session.employee_name,
            self.session.current_sector,
            self.session.selected_avatar,
        )

    @synchronized
    def advance_sector(self, next_sector: Optional[str] = None) -> bool:
        """
        Envía la pieza al próximo sector: RUNNING → FINISHED.

        Si hay próximo sector (argumento o el elegido en la sesión) se
        reasigna antes de finalizar la entrada del ledger.

        Returns:
            False si no hay un trabajo en curso
        """
        if self.state != ProductionState.RUNNING:
            return False

        session = self.session
        session.stop_time = self.clock()
        session.is_running = False
        session.is_finished = True
        if next_sector:
            session.next_sector = next_sector

        if session.next_sector:
            self.ledger.update_sector(session.process_id, session.next_sector)
        self.ledger.finish(session.process_id)
        self._persist()
        logger.info("Producción %s finalizada en %s", session.process_id,
                    format_elapsed(self.elapsed_seconds()))
        return True

    @synchronized
    def reset(self) -> ProductionState:
        """Descarta la sesión y vuelve a IDLE. El ledger no se toca."""
        self.session_repo.clear()
        self.session = self._defaults()
        return self.state

    # =========================================================================
    # TIEMPO
    # =========================================================================

    def elapsed_seconds(self, now: Optional[int] = None) -> int:
        """
        Tiempo transcurrido, recalculado desde los timestamps.

        Args:
            now: Milisegundos epoch (por defecto el reloj del servicio)
        """
        session = self.session
        if session.is_running:
            now = self.clock() if now is None else now
            return max(0, (now - session.start_time) // 1000)
        if session.is_finished and session.stop_time is not None:
            return max(0, (session.stop_time - session.start_time) // 1000)
        return 0

    @synchronized
    def to_dict(self) -> dict:
        """Sesión + estado + tiempo formateado (para la API)."""
        data = self.session.to_dict()
        elapsed = self.elapsed_seconds()
        data.update({
            'state': self.state.value,
            'elapsedSeconds': elapsed,
            'elapsed': format_elapsed(elapsed),
        })
        return data
