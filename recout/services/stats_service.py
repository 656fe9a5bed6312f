# ==============================================================================
# SERVICIO DE ESTADÍSTICAS DE PRODUCCIÓN
# ==============================================================================
# Cálculos de solo lectura sobre el ledger y las colecciones:
#   - Conteo diario y mensual por funcionario
#   - Ocupación por sector contra una tabla fija de capacidad
#
# REGLA PRINCIPAL: Solo entradas 'finished' cuentan para producción.
#
# El conteo mensual usa base × días transcurridos como aproximación de la
# historia previa al ledger. Por eso diario y mensual NO son consistentes
# entre sí y no deben conciliarse.
# ==============================================================================

from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from recout.models import ProductionStatus
from recout.repositories import SnapshotStore

# Capacidad por sector (solo informativa, nada bloquea excederla)
DEFAULT_CAPACITY = 100
SECTOR_CAPACITY = {
    'Triagem': 500,
    'Expedição': 1000,
}


@dataclass
class SectorOccupancy:
    """Ocupación de un sector para el panel."""
    name: str
    count: int
    capacity: int

    @property
    def fill_percent(self) -> int:
        """Porcentaje de llenado, limitado a 100 para mostrar."""
        if self.capacity <= 0:
            return 100 if self.count else 0
        return min(100, int(self.count * 100 / self.capacity + 0.5))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['fillPercent'] = self.fill_percent
        return data


def _ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def day_range(now: datetime) -> Tuple[int, int]:
    """Día calendario local [00:00, próximo 00:00) en milisegundos."""
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    return _ms(start), _ms(start + timedelta(days=1))


def month_range(now: datetime) -> Tuple[int, int]:
    """Mes calendario local [día 1, día 1 del mes siguiente) en milisegundos."""
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return _ms(start), _ms(end)


def sector_capacity(name: str) -> int:
    return SECTOR_CAPACITY.get(name, DEFAULT_CAPACITY)


class StatsService:
    """
    Motor de agregación. No guarda estado ni recarga el snapshot: usa lo que
    ya está en memoria en el store.

    Uso:
        stats = StatsService(store)
        stats.daily_count('Carlos')
        stats.sector_stats()
    """

    def __init__(self, store: SnapshotStore):
        self.store = store

    # =========================================================================
    # CONTEOS POR FUNCIONARIO
    # =========================================================================

    def _base(self, employee_name: str) -> int:
        for employee in self.store.employees:
            if employee.name == employee_name:
                return employee.daily_production_base or 0
        return 0

    def _finished_between(self, employee_name: str, start: int, end: int) -> int:
        return sum(
            1 for entry in self.store.production
            if entry.employee_name == employee_name
            and entry.status == ProductionStatus.FINISHED
            and start <= entry.start_time < end
        )

    def daily_count(self, employee_name: str, now: Optional[datetime] = None) -> int:
        """
        Producción del día.

        base diaria + entradas 'finished' del funcionario iniciadas hoy.
        """
        now = now or datetime.now()
        start, end = day_range(now)
        return self._base(employee_name) + self._finished_between(employee_name, start, end)

    def monthly_count(self, employee_name: str, now: Optional[datetime] = None) -> int:
        """
        Producción del mes.

        base diaria × días transcurridos del mes (historia simulada) +
        entradas 'finished' del funcionario iniciadas este mes.
        """
        now = now or datetime.now()
        start, end = month_range(now)
        simulated = self._base(employee_name) * now.day
        return simulated + self._finished_between(employee_name, start, end)

    def total_daily(self, now: Optional[datetime] = None) -> int:
        """Producción del día de todos los funcionarios."""
        now = now or datetime.now()
        return sum(self.daily_count(e.name, now) for e in self.store.employees)

    def monthly_ranking(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Funcionarios ordenados por producción mensual (mayor primero)."""
        now = now or datetime.now()
        ranking = [
            {
                'name': e.name,
                'sector': e.sector,
                'avatar': e.avatar,
                'count': self.monthly_count(e.name, now),
            }
            for e in self.store.employees
        ]
        ranking.sort(key=lambda r: r['count'], reverse=True)
        return ranking

    # =========================================================================
    # SECTORES
    # =========================================================================

    def occupancy(self, sector_name: str) -> int:
        """Productos en el sector + trabajos 'working' en el sector."""
        products = sum(1 for p in self.store.products if p.sector == sector_name)
        working = sum(
            1 for entry in self.store.production
            if entry.current_sector == sector_name
            and entry.status == ProductionStatus.WORKING
        )
        return products + working

    def sector_stats(self) -> List[SectorOccupancy]:
        return [
            SectorOccupancy(
                name=sector.name,
                count=self.occupancy(sector.name),
                capacity=sector_capacity(sector.name),
            )
            for sector in self.store.sectors
        ]

    # =========================================================================
    # PANEL EN VIVO
    # =========================================================================

    def live_production(self, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Trabajos activos ('working' o 'paused') con tiempo transcurrido,
        del más reciente al más antiguo.
        """
        now = now or datetime.now()
        now_ms = _ms(now)
        active = (ProductionStatus.WORKING, ProductionStatus.PAUSED)
        live = [
            {
                'id': entry.id,
                'employeeName': entry.employee_name,
                'avatar': entry.avatar,
                'partName': entry.part_name,
                'partCode': entry.part_code,
                'currentSector': entry.current_sector,
                'status': entry.status.value,
                'dailyCount': self.daily_count(entry.employee_name, now),
                'elapsedSeconds': max(0, (now_ms - entry.start_time) // 1000),
            }
            for entry in self.store.production
            if entry.status in active
        ]
        live.sort(key=lambda item: item['elapsedSeconds'])
        return live

    def dashboard_snapshot(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """Todo lo que el panel muestra en cada refresco."""
        now = now or datetime.now()
        return {
            'generatedAt': now.isoformat(timespec='seconds'),
            'totalDaily': self.total_daily(now),
            'live': self.live_production(now),
            'sectors': [s.to_dict() for s in self.sector_stats()],
        }
