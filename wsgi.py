# ==============================================================================
# WSGI Entry Point - Para Gunicorn
# ==============================================================================
# USO:
#   gunicorn wsgi:app --bind 0.0.0.0:$PORT
#
# ESTRUCTURA DEL PROYECTO:
#   repo_root/           <- Directorio de trabajo
#   ├── wsgi.py          <- Este archivo
#   ├── pyproject.toml
#   └── recout/          <- Paquete Python
#       ├── main.py
#       ├── services/
#       ├── repositories/
#       └── models/
# ==============================================================================

from recout.main import create_app

app = create_app()

if __name__ == '__main__':
    app.run(debug=True, host='0.0.0.0', port=5000)
