# ==============================================================================
# PERSISTENCIA BASE - Snapshot JSON único con recarga antes de escribir
# ==============================================================================
# Todo el estado del taller vive en un solo archivo JSON:
#   {employees, products, clients, production, sectors, currentUser}
#
# DISCIPLINA "RELOAD-BEFORE-WRITE":
# Cada operación que modifica datos llama a load() antes de aplicar su
# cambio y luego a save() con el snapshot completo. Así dos procesos que
# comparten el archivo no se pisan colecciones enteras.
#
# Dentro del proceso las mutaciones sostienen `lock` durante todo el
# ciclo load → cambio → save.
#
# LIMITACIÓN CONOCIDA (aceptada):
# Entre procesos, dos escrituras concurrentes sobre la MISMA colección pueden
# perder una actualización (lost update). No hay lock entre procesos ni versión.
# ==============================================================================

import json
import logging
import os
import threading
from typing import Any, Dict, List, Optional

from recout.models import Client, Employee, Product, ProductionEntry, Sector

logger = logging.getLogger(__name__)

SNAPSHOT_FILENAME = 'recout_system.json'


def default_employees() -> List[Employee]:
    """Estado limpio: solo el administrador."""
    return [
        Employee(
            id=1,
            name='Administrador',
            sector='Administração',
            avatar=None,
            cpf='000.000.000-00',
            status='Online',
            daily_production_base=0,
            username='admin',
            password='123',
        )
    ]


def default_sectors() -> List[Sector]:
    return [
        Sector(1, 'Triagem', 'João Paulo', 'Recebimento e separação inicial de materiais.'),
        Sector(2, 'Corte', 'Ana Maria', 'Corte de tecidos conforme moldes.'),
        Sector(3, 'Costura', 'Pedro Santos', 'Montagem das peças.'),
        Sector(4, 'Montagem Final', 'Carlos Oliveira', 'Acabamento e verificação final.'),
        Sector(5, 'Bordado', 'Fernanda Lima', 'Aplicação de bordados e detalhes.'),
        Sector(6, 'Embalagem', 'Roberto Costa', 'Embalamento final dos produtos.'),
        Sector(7, 'Expedição', 'Juliana Silva', 'Envio para o cliente.'),
    ]


class BaseRepository:
    """
    Acceso a un archivo JSON con escritura atómica.

    Los errores de lectura (archivo ausente, JSON inválido) se registran y
    se devuelve None: el sistema prefiere seguir funcionando con el último
    estado conocido antes que caerse.
    """

    # Lock global para evitar escrituras concurrentes dentro del proceso
    _file_lock = threading.RLock()

    def __init__(self, file_path: str):
        self.file_path = file_path

    @property
    def lock(self) -> threading.RLock:
        """Lock del proceso; agrupa load → cambio → save en una sola operación."""
        return self._file_lock

    def _read_raw(self) -> Optional[Any]:
        """Lee y parsea el archivo. Retorna None si no existe o es inválido."""
        with self._file_lock:
            try:
                with open(self.file_path, 'r', encoding='utf-8') as f:
                    return json.load(f)
            except FileNotFoundError:
                logger.debug("Sin datos persistidos en %s", self.file_path)
                return None
            except (OSError, ValueError) as e:
                logger.error("Error al cargar datos de %s: %s", self.file_path, e)
                return None

    def _write_raw(self, data: Any) -> bool:
        """
        Escribe datos al archivo de forma atómica.

        Returns:
            True si se escribió; False si falló (el error queda en el log)
        """
        with self._file_lock:
            temp_path = self.file_path + '.tmp'
            try:
                directory = os.path.dirname(self.file_path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
                with open(temp_path, 'w', encoding='utf-8') as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                os.replace(temp_path, self.file_path)
                return True
            except (OSError, TypeError, ValueError) as e:
                logger.error("Error al guardar datos en %s: %s", self.file_path, e)
                if os.path.exists(temp_path):
                    os.remove(temp_path)
                return False


class SnapshotStore(BaseRepository):
    """
    Almacén persistente con todas las colecciones del sistema.

    Una única instancia se inyecta en todos los repositorios y servicios
    (ver AppContainer). Las colecciones en memoria son listas de entidades.

    Uso:
        store = SnapshotStore('/data/recout_system.json')
        store.load()
        store.products.append(product)
        store.save()
    """

    # clave JSON -> (atributo, tipo de entidad)
    COLLECTIONS = (
        ('employees', Employee),
        ('products', Product),
        ('clients', Client),
        ('production', ProductionEntry),
        ('sectors', Sector),
    )

    def __init__(self, file_path: str, autoload: bool = True):
        super().__init__(file_path)
        self.employees: List[Employee] = default_employees()
        self.products: List[Product] = []
        self.clients: List[Client] = []
        self.production: List[ProductionEntry] = []
        self.sectors: List[Sector] = default_sectors()
        self.current_user: Optional[Employee] = None
        # registros ilegibles por colección, se reescriben tal cual al guardar
        self.unparsed: Dict[str, List[Any]] = {}
        if autoload:
            self.load()

    def load(self) -> bool:
        """
        Recarga el snapshot desde disco.

        Cada clave se aplica por separado: si falta o no es una lista, esa
        colección conserva su valor en memoria. Un registro que no se puede
        leer se registra en el log y se guarda aparte en `unparsed` para que
        el próximo save() no lo pierda.

        Returns:
            True si se leyó un snapshot válido
        """
        data = self._read_raw()
        if not isinstance(data, dict):
            if data is not None:
                logger.error("Snapshot inválido en %s: se esperaba un objeto", self.file_path)
            return False

        for key, entity_cls in self.COLLECTIONS:
            records = data.get(key)
            if not isinstance(records, list):
                continue
            parsed, unparsed = [], []
            for record in records:
                try:
                    parsed.append(entity_cls.from_dict(record))
                except (KeyError, TypeError, ValueError) as e:
                    logger.error("Registro inválido en '%s' de %s: %s", key, self.file_path, e)
                    unparsed.append(record)
            setattr(self, key, parsed)
            self.unparsed[key] = unparsed

        current = data.get('currentUser')
        if isinstance(current, dict):
            try:
                self.current_user = Employee.from_dict(current)
            except (KeyError, TypeError, ValueError) as e:
                logger.error("Usuario actual malformado en %s: %s", self.file_path, e)
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Snapshot completo en el formato persistido."""
        data = {
            key: [e.to_dict() for e in getattr(self, key)] + self.unparsed.get(key, [])
            for key, _ in self.COLLECTIONS
        }
        data['currentUser'] = self.current_user.to_dict() if self.current_user else None
        return data

    def save(self) -> bool:
        """Persiste el snapshot completo (no hay escritura parcial)."""
        return self._write_raw(self.to_dict())


class CollectionRepository:
    """
    Repositorio de una colección del snapshot.

    Las mutaciones siguen reload-before-write. No hay validación ni
    control de unicidad: eso es responsabilidad de quien llama
    (ver RegistryService).
    """

    collection: str = ''

    def __init__(self, store: SnapshotStore):
        self.store = store

    def _items(self) -> List[Any]:
        return getattr(self.store, self.collection)

    def get_all(self) -> List[Any]:
        """Colección en memoria, sin recargar."""
        return self._items()

    def get_by_id(self, record_id: Any) -> Optional[Any]:
        for item in self._items():
            if item.id == record_id:
                return item
        return None

    def add(self, entity: Any) -> None:
        with self.store.lock:
            self.store.load()
            self._items().append(entity)
            self.store.save()
        logger.info("%s: agregado id=%s", self.collection, entity.id)

    def remove(self, record_id: Any) -> None:
        """Filtra por id. Un id inexistente no es error."""
        with self.store.lock:
            self.store.load()
            remaining = [item for item in self._items() if item.id != record_id]
            setattr(self.store, self.collection, remaining)
            self.store.save()
