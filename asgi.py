"""
asgi.py -- Application assembly for the request gate.

Settings come from the environment (.env, SECURITY, SECURITY_CONFIG_FILE).
Modules listed in CHECK_MODULES are imported by create_app() so their checks
register themselves on core.registry.default_registry.

Run with:  uvicorn asgi:app --reload
"""

from api.main import create_app

app = create_app()
