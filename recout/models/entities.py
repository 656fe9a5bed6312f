# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del chão de fábrica.
# Las claves de to_dict() respetan el formato del snapshot JSON
# (camelCase) para que los archivos existentes sigan siendo compatibles.
# ==============================================================================

from dataclasses import dataclass
from typing import Optional, Dict, Any
from enum import Enum


# ==============================================================================
# ENUMERACIONES - Estados válidos
# ==============================================================================

class ProductionStatus(str, Enum):
    """Estados de una entrada del ledger de producción."""
    WORKING = "working"
    PAUSED = "paused"
    FINISHED = "finished"


class ProductionState(str, Enum):
    """Estados de la máquina de producción de un operador."""
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"


# ==============================================================================
# FUNCIONARIOS
# ==============================================================================

@dataclass
class Employee:
    """
    Funcionario del taller.

    Attributes:
        id: Identificador único
        name: Nombre visible (también usado como referencia en el ledger)
        sector: Nombre del sector (referencia por nombre, no por id)
        avatar: Imagen en data-URL (opcional)
        cpf: Documento nacional (opcional)
        status: Etiqueta libre ('Online', 'Offline', ...)
        daily_production_base: Producción histórica previa al ledger
        username: Login (None en filas de demostración)
        password: Contraseña en texto plano (legacy) o hash de werkzeug
    """
    id: int
    name: str
    sector: str = ''
    avatar: Optional[str] = None
    cpf: Optional[str] = None
    status: Optional[str] = None
    daily_production_base: int = 0
    username: Optional[str] = None
    password: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia."""
        return {
            'id': self.id,
            'name': self.name,
            'sector': self.sector,
            'avatar': self.avatar,
            'cpf': self.cpf,
            'status': self.status,
            'dailyProductionBase': self.daily_production_base,
            'username': self.username,
            'password': self.password,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Igual que to_dict() pero sin la contraseña (para respuestas HTTP)."""
        data = self.to_dict()
        data.pop('password')
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Employee':
        """Crea instancia desde diccionario."""
        return cls(
            id=data['id'],
            name=data['name'],
            sector=data.get('sector', ''),
            avatar=data.get('avatar'),
            cpf=data.get('cpf'),
            status=data.get('status'),
            daily_production_base=int(data.get('dailyProductionBase') or 0),
            username=data.get('username'),
            password=data.get('password'),
        )


# ==============================================================================
# CLIENTES, PRODUCTOS Y SECTORES
# ==============================================================================

@dataclass
class Client:
    """Cliente que encarga piezas. `contact` es el teléfono."""
    id: int
    name: str
    doc: str = ''
    contact: str = ''
    email: str = ''
    address: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'doc': self.doc,
            'contact': self.contact,
            'email': self.email,
            'address': self.address,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Client':
        return cls(
            id=data['id'],
            name=data['name'],
            doc=data.get('doc', ''),
            contact=data.get('contact', ''),
            email=data.get('email', ''),
            address=data.get('address', ''),
        )


@dataclass
class Product:
    """
    Pieza registrada.

    `client` y `sector` son nombres, no ids: renombrar un cliente o sector
    no actualiza los productos existentes.
    """
    id: int
    name: str
    code: str
    client: str
    sector: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'code': self.code,
            'client': self.client,
            'sector': self.sector,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        return cls(
            id=data['id'],
            name=data['name'],
            code=str(data['code']),
            client=data.get('client', ''),
            sector=data.get('sector', ''),
        )


@dataclass
class Sector:
    """Etapa del flujo de producción. El nombre es la clave de unión."""
    id: int
    name: str
    manager: str = ''
    description: str = ''

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'manager': self.manager,
            'description': self.description,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sector':
        return cls(
            id=data['id'],
            name=data['name'],
            manager=data.get('manager', ''),
            description=data.get('description', ''),
        )


# ==============================================================================
# PRODUCCIÓN
# ==============================================================================

@dataclass
class ProductionEntry:
    """
    Entrada del ledger de producción (nunca se elimina).

    Attributes:
        id: Código del producto (mismo valor que part_code)
        employee_name: Nombre del funcionario que inició el trabajo
        avatar: Copia del avatar al momento del inicio
        part_name: Nombre de la pieza
        part_code: Código de la pieza
        current_sector: Sector actual (por nombre)
        start_time: Inicio en milisegundos epoch
        status: working / paused / finished
    """
    id: str
    employee_name: str
    part_name: str
    part_code: str
    current_sector: str
    start_time: int
    status: ProductionStatus = ProductionStatus.WORKING
    avatar: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.status == ProductionStatus.FINISHED

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'employeeName': self.employee_name,
            'avatar': self.avatar,
            'partName': self.part_name,
            'partCode': self.part_code,
            'currentSector': self.current_sector,
            'startTime': self.start_time,
            'status': self.status.value if isinstance(self.status, Enum) else self.status,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductionEntry':
        return cls(
            id=str(data['id']),
            employee_name=data['employeeName'],
            avatar=data.get('avatar'),
            part_name=data.get('partName', ''),
            part_code=str(data.get('partCode', data['id'])),
            current_sector=data.get('currentSector', ''),
            start_time=int(data['startTime']),
            status=ProductionStatus(data.get('status', 'working')),
        )


@dataclass
class ProductionSession:
    """
    Estado efímero del flujo de producción de un operador.

    Existe una sola instancia por proceso (último en escribir gana).
    Los tiempos son milisegundos epoch; el tiempo transcurrido se recalcula
    siempre a partir de ellos.
    """
    employee_name: str = ''
    client_name: str = ''
    part_name: str = ''
    part_id: str = ''
    current_sector: str = ''
    next_sector: str = ''
    selected_avatar: Optional[str] = None
    process_id: str = ''
    is_running: bool = False
    is_finished: bool = False
    start_time: int = 0
    stop_time: Optional[int] = None

    @property
    def state(self) -> ProductionState:
        if self.is_running:
            return ProductionState.RUNNING
        if self.is_finished:
            return ProductionState.FINISHED
        return ProductionState.IDLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            'employeeName': self.employee_name,
            'clientName': self.client_name,
            'partName': self.part_name,
            'partId': self.part_id,
            'currentSector': self.current_sector,
            'nextSector': self.next_sector,
            'selectedAvatar': self.selected_avatar,
            'processId': self.process_id,
            'isRunning': self.is_running,
            'isFinished': self.is_finished,
            'startTime': self.start_time,
            'stopTime': self.stop_time,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProductionSession':
        stop_time = data.get('stopTime')
        return cls(
            employee_name=data.get('employeeName', ''),
            client_name=data.get('clientName', ''),
            part_name=data.get('partName', ''),
            part_id=data.get('partId', ''),
            current_sector=data.get('currentSector', ''),
            next_sector=data.get('nextSector', ''),
            selected_avatar=data.get('selectedAvatar'),
            process_id=data.get('processId', ''),
            is_running=bool(data.get('isRunning', False)),
            is_finished=bool(data.get('isFinished', False)),
            start_time=int(data.get('startTime') or 0),
            stop_time=int(stop_time) if stop_time is not None else None,
        )
