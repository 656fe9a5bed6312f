# ==============================================================================
# API HTTP (Flask) - Superficie JSON sobre el núcleo
# ==============================================================================
# Las rutas solo orquestan request → service → response. Toda la lógica
# está en services/ y toda la persistencia en repositories/.
#
# Respuestas: {"ok": true, ...} o {"ok": false, "error": "..."}
# ==============================================================================

import json
import logging
import os
from functools import wraps
from queue import Empty, Queue

from flask import Blueprint, Flask, Response, current_app, jsonify, request, session

from recout.app_container import AppContainer, DEFAULT_DATA_DIR
from recout.performance_logger import configure_logging, init_profiling
from recout.services import DashboardRefresher, DuplicateRecordError, RecoveryServiceError, ValidationError
from recout.services.recovery_service import DEFAULT_MODEL

logger = logging.getLogger(__name__)

BASE = os.path.dirname(os.path.abspath(__file__))

# ═══════════════════════════════════════════════════════════════════════════════
# CONFIGURACIÓN
# ═══════════════════════════════════════════════════════════════════════════════
# SECRET_KEY: En producción DEBE definirse via variable de entorno
# Comando: export RECOUT_SECRET_KEY="clave_larga_y_aleatoria"
_DEFAULT_SECRET = "recout_dev_secret_key_change_in_production"

api = Blueprint('api', __name__, url_prefix='/api')


def _container() -> AppContainer:
    return current_app.extensions['recout']


def _error(message: str, status: int):
    return jsonify({'ok': False, 'error': message}), status


def _payload() -> dict:
    return request.get_json(silent=True) or {}


def _session_user():
    """
    Usuario actual, solo si es el mismo que inició sesión con esta cookie.

    El puntero persistido es único por proceso; la cookie de Flask ata cada
    cliente HTTP a su propio login.
    """
    user = _container().auth_service.get_current_user()
    if user is None or session.get('user_id') != user.id:
        return None
    return user


def login_required(f):
    @wraps(f)
    def wrapper(*args, **kwargs):
        if _session_user() is None:
            return _error('Debes iniciar sesión.', 401)
        return f(*args, **kwargs)
    return wrapper


# ═══════════════════════════════════════════════════════════════════════════════
# AUTENTICACIÓN
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/login', methods=['POST'])
def login():
    data = _payload()
    username = (data.get('username') or '').strip()
    password = data.get('password') or ''
    if not username or not password:
        return _error('Usuario y contraseña requeridos.', 400)

    container = _container()
    if not container.auth_service.login(username, password):
        return _error('Usuario o contraseña incorrecta.', 401)

    user = container.auth_service.get_current_user()
    session.clear()
    session['user'] = user.username
    session['user_id'] = user.id
    container.production_service.restore(user)
    return jsonify({'ok': True, 'user': user.to_public_dict()})


@api.route('/logout', methods=['POST'])
@login_required
def logout():
    container = _container()
    container.auth_service.logout()
    session.clear()
    container.production_service.restore(None)
    return jsonify({'ok': True})


@api.route('/me')
@login_required
def me():
    return jsonify({'ok': True, 'user': _session_user().to_public_dict()})


@api.route('/register', methods=['POST'])
def register():
    """Autoregistro desde la pantalla de login (sector por defecto: Triagem)."""
    data = _payload()
    employee = _container().registry_service.register_employee(
        name=data.get('name', ''),
        username=data.get('username', ''),
        password=data.get('password', ''),
        cpf=data.get('cpf', ''),
        avatar=data.get('avatar'),
    )
    return jsonify({'ok': True, 'employee': employee.to_public_dict()}), 201


# ═══════════════════════════════════════════════════════════════════════════════
# CADASTROS
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/employees', methods=['GET', 'POST'])
@login_required
def employees():
    container = _container()
    if request.method == 'POST':
        data = _payload()
        employee = container.registry_service.register_employee(
            name=data.get('name', ''),
            username=data.get('username', ''),
            password=data.get('password', ''),
            cpf=data.get('cpf', ''),
            sector=data.get('sector') or 'Triagem',
            avatar=data.get('avatar'),
        )
        return jsonify({'ok': True, 'employee': employee.to_public_dict()}), 201
    return jsonify({'ok': True, 'employees': [e.to_public_dict() for e in container.employees.get_all()]})


@api.route('/employees/<int:employee_id>', methods=['DELETE'])
@login_required
def delete_employee(employee_id):
    _container().employees.remove(employee_id)
    return jsonify({'ok': True})


@api.route('/clients', methods=['GET', 'POST'])
@login_required
def clients():
    container = _container()
    if request.method == 'POST':
        data = _payload()
        client = container.registry_service.register_client(
            name=data.get('name', ''),
            doc=data.get('doc', ''),
            contact=data.get('contact', ''),
            email=data.get('email', ''),
            address=data.get('address', ''),
        )
        return jsonify({'ok': True, 'client': client.to_dict()}), 201
    return jsonify({'ok': True, 'clients': [c.to_dict() for c in container.clients.get_all()]})


@api.route('/clients/<int:client_id>', methods=['DELETE'])
@login_required
def delete_client(client_id):
    _container().clients.remove(client_id)
    return jsonify({'ok': True})


@api.route('/products', methods=['GET', 'POST'])
@login_required
def products():
    container = _container()
    if request.method == 'POST':
        data = _payload()
        product = container.registry_service.register_product(
            name=data.get('name', ''),
            client=data.get('client', ''),
            sector=data.get('sector') or 'Triagem',
        )
        return jsonify({'ok': True, 'product': product.to_dict()}), 201
    return jsonify({
        'ok': True,
        'products': [p.to_dict() for p in container.products.get_all()],
        'nextCode': container.registry_service.next_product_code(),
    })


@api.route('/products/<int:product_id>', methods=['DELETE'])
@login_required
def delete_product(product_id):
    _container().products.remove(product_id)
    return jsonify({'ok': True})


@api.route('/sectors', methods=['GET', 'POST'])
@login_required
def sectors():
    container = _container()
    if request.method == 'POST':
        data = _payload()
        sector = container.registry_service.create_sector(
            name=data.get('name', ''),
            manager=data.get('manager', ''),
            description=data.get('description', ''),
        )
        return jsonify({'ok': True, 'sector': sector.to_dict()}), 201
    return jsonify({'ok': True, 'sectors': [s.to_dict() for s in container.sectors.get_all()]})


@api.route('/sectors/<int:sector_id>', methods=['PUT', 'DELETE'])
@login_required
def sector_detail(sector_id):
    container = _container()
    if request.method == 'DELETE':
        container.sectors.remove(sector_id)
        return jsonify({'ok': True})
    data = _payload()
    sector = container.registry_service.update_sector(
        sector_id,
        name=data.get('name', ''),
        manager=data.get('manager', ''),
        description=data.get('description', ''),
    )
    return jsonify({'ok': True, 'sector': sector.to_dict()})


# ═══════════════════════════════════════════════════════════════════════════════
# PRODUCCIÓN
# ═══════════════════════════════════════════════════════════════════════════════

def _session_response(changed: bool = True):
    production = _container().production_service
    body = {'ok': changed, 'session': production.to_dict()}
    if not changed:
        body['error'] = 'Acción no disponible en el estado actual.'
        return jsonify(body), 409
    return jsonify(body)


@api.route('/production')
@login_required
def production_ledger():
    entries = _container().production.get_all()
    return jsonify({'ok': True, 'production': [e.to_dict() for e in entries]})


@api.route('/production/session')
@login_required
def production_session():
    return _session_response()


@api.route('/production/part', methods=['POST'])
@login_required
def production_select_part():
    container = _container()
    product = container.products.find_by_code(str(_payload().get('code', '')))
    if product is None:
        return _error('Pieza no encontrada.', 404)
    return _session_response(container.production_service.select_part(product))


@api.route('/production/sector', methods=['POST'])
@login_required
def production_select_sector():
    data = _payload()
    name = data.get('name', '')
    production = _container().production_service
    if data.get('kind') == 'next':
        return _session_response(production.set_next_sector(name))
    return _session_response(production.set_current_sector(name))


@api.route('/production/start', methods=['POST'])
@login_required
def production_start():
    return _session_response(_container().production_service.start_selected())


@api.route('/production/advance', methods=['POST'])
@login_required
def production_advance():
    next_sector = _payload().get('nextSector')
    return _session_response(_container().production_service.advance_sector(next_sector))


@api.route('/production/reset', methods=['POST'])
@login_required
def production_reset():
    _container().production_service.reset()
    return _session_response()


# ═══════════════════════════════════════════════════════════════════════════════
# PANEL Y REPORTES
# ═══════════════════════════════════════════════════════════════════════════════

@api.route('/dashboard')
@login_required
def dashboard():
    snapshot = _container().stats_service.dashboard_snapshot()
    return jsonify({'ok': True, **snapshot})


@api.route('/dashboard/stream')
@login_required
def dashboard_stream():
    """
    Panel en vivo por Server-Sent Events.

    Cada conexión tiene su propio DashboardRefresher: arranca al abrir el
    stream y se detiene cuando el cliente se desconecta. `?events=N` corta
    el stream después de N snapshots.
    """
    max_events = request.args.get('events', type=int)
    interval = current_app.config['DASHBOARD_INTERVAL']
    updates = Queue()
    refresher = DashboardRefresher(_container().stats_service, updates.put, interval=interval)

    def generate():
        sent = 0
        with refresher:
            while max_events is None or sent < max_events:
                try:
                    snapshot = updates.get(timeout=max(interval * 5, 1.0))
                except Empty:
                    yield ': keepalive\n\n'
                    continue
                yield f"data: {json.dumps(snapshot, ensure_ascii=False)}\n\n"
                sent += 1

    return Response(generate(), mimetype='text/event-stream')


@api.route('/reports/monthly')
@login_required
def monthly_report():
    return jsonify({'ok': True, 'ranking': _container().stats_service.monthly_ranking()})


@api.route('/recovery', methods=['POST'])
@login_required
def recovery():
    description = (_payload().get('description') or '').strip()
    if not description:
        return _error('Descreva o projeto perdido.', 400)
    plan = _container().recovery_service.generate_plan(description)
    return jsonify({'ok': True, 'plan': plan})


# ═══════════════════════════════════════════════════════════════════════════════
# ERRORES
# ═══════════════════════════════════════════════════════════════════════════════

@api.errorhandler(ValidationError)
def handle_validation_error(e):
    return _error(str(e), 409 if isinstance(e, DuplicateRecordError) else 400)


@api.errorhandler(RecoveryServiceError)
def handle_recovery_error(e):
    return _error(str(e), 502)


def set_security_headers(response):
    response.headers['X-Frame-Options'] = 'DENY'
    response.headers['X-Content-Type-Options'] = 'nosniff'
    response.headers['Referrer-Policy'] = 'no-referrer-when-downgrade'
    return response


# ═══════════════════════════════════════════════════════════════════════════════
# FACTORY
# ═══════════════════════════════════════════════════════════════════════════════

def create_app(config=None, container: AppContainer = None) -> Flask:
    """
    Crea la aplicación Flask.

    Args:
        config: Valores que sobrescriben la configuración por entorno
        container: Contenedor ya construido (tests)
    """
    app = Flask(__name__)
    app.config.update(
        SECRET_KEY=os.environ.get('RECOUT_SECRET_KEY') or _DEFAULT_SECRET,
        DATA_DIR=os.environ.get('RECOUT_DATA_DIR') or DEFAULT_DATA_DIR,
        LOGS_DIR=os.environ.get('RECOUT_LOGS_DIR') or os.path.join(BASE, 'logs'),
        GEMINI_API_KEY=os.environ.get('GEMINI_API_KEY'),
        GEMINI_MODEL=os.environ.get('RECOUT_GEMINI_MODEL') or DEFAULT_MODEL,
        PROFILING=os.environ.get('RECOUT_PROFILING', '1') == '1',
        DASHBOARD_INTERVAL=float(os.environ.get('RECOUT_DASHBOARD_INTERVAL') or DashboardRefresher.DEFAULT_INTERVAL),
    )
    if config:
        app.config.update(config)

    configure_logging(app.config['LOGS_DIR'])
    if app.config['SECRET_KEY'] == _DEFAULT_SECRET and not app.config.get('TESTING'):
        logger.warning("RECOUT_SECRET_KEY no definida; usando clave de desarrollo")

    if container is None:
        container = AppContainer(
            data_dir=app.config['DATA_DIR'],
            gemini_api_key=app.config['GEMINI_API_KEY'],
            gemini_model=app.config['GEMINI_MODEL'],
        )
    app.extensions['recout'] = container

    if app.config['PROFILING']:
        init_profiling(app)
    app.register_blueprint(api)
    app.after_request(set_security_headers)
    return app


if __name__ == '__main__':
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    HOST = os.environ.get('FLASK_HOST', '0.0.0.0')
    PORT = int(os.environ.get('FLASK_PORT', 5000))
    create_app().run(debug=DEBUG, host=HOST, port=PORT)
