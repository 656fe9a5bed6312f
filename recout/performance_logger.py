# ==============================================================================
# LOGGING Y PROFILING DE RUTAS
# ==============================================================================
# - configure_logging(): handlers de archivo en /logs/ (app.log y
#   slow_routes.log) más consola.
# - init_profiling(app): mide cada request de Flask y registra las lentas.
#
# ACTIVAR/DESACTIVAR: variable de entorno RECOUT_PROFILING ('1' / '0')
# ==============================================================================

import logging
import os
import time

from flask import g, request

# Umbrales de tiempo (en milisegundos)
THRESHOLD_WARNING = 300
THRESHOLD_CRITICAL = 700

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'

# Nombres legibles para los logs
ROUTE_NAMES = {
    'POST /api/login': 'Iniciar sesión',
    'POST /api/logout': 'Cerrar sesión',
    'GET /api/dashboard': 'Ver panel',
    'POST /api/production/start': 'Iniciar producción',
    'POST /api/production/advance': 'Avanzar sector',
    'POST /api/production/reset': 'Reiniciar producción',
    'POST /api/recovery': 'Plan de recuperación',
}

perf_logger = logging.getLogger('recout.performance')
slow_logger = logging.getLogger('recout.performance.slow')


def configure_logging(logs_dir: str, level: int = logging.INFO) -> None:
    """
    Configura el logger raíz del paquete.

    Idempotente: no duplica handlers si se llama varias veces.
    """
    os.makedirs(logs_dir, exist_ok=True)
    root = logging.getLogger('recout')
    root.setLevel(level)
    if getattr(root, '_recout_configured', False):
        return

    formatter = logging.Formatter(LOG_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    root.addHandler(console)

    app_file = logging.FileHandler(os.path.join(logs_dir, 'app.log'), encoding='utf-8')
    app_file.setFormatter(formatter)
    root.addHandler(app_file)

    slow_file = logging.FileHandler(os.path.join(logs_dir, 'slow_routes.log'), encoding='utf-8')
    slow_file.setFormatter(formatter)
    slow_logger.addHandler(slow_file)

    root._recout_configured = True


def route_name(method: str, rule: str) -> str:
    key = f"{method} {rule}"
    return ROUTE_NAMES.get(key, key)


def init_profiling(app) -> None:
    """Registra hooks before_request/after_request para medir rutas."""

    @app.before_request
    def _start_timer():
        g._recout_started = time.perf_counter()

    @app.after_request
    def _log_timing(response):
        started = getattr(g, '_recout_started', None)
        if started is None:
            return response
        elapsed_ms = (time.perf_counter() - started) * 1000
        rule = request.url_rule.rule if request.url_rule else request.path
        name = route_name(request.method, rule)

        perf_logger.debug("%s %s -> %s (%.0f ms)", name, request.path,
                          response.status_code, elapsed_ms)
        if elapsed_ms >= THRESHOLD_CRITICAL:
            slow_logger.critical("Ruta MUY LENTA: %s (%.0f ms, umbral %d ms)",
                                 name, elapsed_ms, THRESHOLD_CRITICAL)
        elif elapsed_ms >= THRESHOLD_WARNING:
            slow_logger.warning("Ruta LENTA: %s (%.0f ms, umbral %d ms)",
                                name, elapsed_ms, THRESHOLD_WARNING)
        return response
