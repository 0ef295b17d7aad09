# app.py
from flask import Flask, jsonify, current_app
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
import logging
from typing import Optional

from configuracion import Config
from inicializar_db import crear_tablas, resolve_db_uri
from servicios.servicio_pedidos.contenedor import ServiciosPedidos
from servicios.servicio_pedidos.presentacion.rutas import pedidos_bp
from servicios.servicio_pedidos.presentacion.rutas_salud import salud_bp


def _configurar_logging(app: Flask) -> None:
    log_level = str(app.config.get("LOG_LEVEL") or "INFO").upper()
    if not app.logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        app.logger.addHandler(handler)
    app.logger.setLevel(getattr(logging, log_level, logging.INFO))
    # Los casos de uso registran en 'servicios.*'
    logging.getLogger("servicios").setLevel(getattr(logging, log_level, logging.INFO))


def crear_app(config_override: Optional[dict] = None):
    app = Flask(__name__)
    app.config.from_object(Config)
    if config_override:
        app.config.update(config_override)

    _configurar_logging(app)

    # CORS_ORIGINS: lista separada por comas, o "*"
    cors_env = app.config.get("CORS_ORIGINS") or "*"
    allowed = [o.strip() for o in cors_env.split(",") if o.strip()] if cors_env != "*" else "*"
    CORS(app, resources={r"/api/*": {"origins": allowed}})

    # Permite acceder con y sin "/" al final sin redirigir
    app.url_map.strict_slashes = False

    db_uri = resolve_db_uri(app.config.get("SQLALCHEMY_DATABASE_URI"))
    app.config["SQLALCHEMY_DATABASE_URI"] = db_uri
    servicios = ServiciosPedidos.desde_config(app.config)
    app.extensions["servicios_pedidos"] = servicios
    if app.config.get("CREAR_TABLAS", True):
        # Mismo engine que el repositorio: una SQLite en memoria no se comparte entre engines
        crear_tablas(servicios.repositorio.engine)
    app.logger.info(
        "Perfil %s: base %s, %d estados de pedido configurados",
        app.config.get("APP_ENV"), servicios.repositorio.engine.url.render_as_string(hide_password=True),
        len(servicios.flujo.estados),
    )

    # Blueprints
    app.register_blueprint(pedidos_bp)  # /api/v1/pedidos/*
    app.register_blueprint(salud_bp)    # /api/v1/health

    @app.errorhandler(404)
    def pagina_no_encontrada(_error):
        return jsonify({"ok": False, "error": "Ruta no encontrada"}), 404

    @app.errorhandler(HTTPException)
    def _error_http(e):
        return jsonify({"ok": False, "error": e.description}), e.code

    @app.errorhandler(Exception)
    def _unhandled(e):
        current_app.logger.exception("Error no controlado: %s", e)
        return jsonify({"ok": False, "error": "server_error"}), 500

    return app

create_app = crear_app

if __name__ == "__main__":
    app = crear_app()
    print(f"Iniciando servidor Flask ({Config.APP_ENV}). Accede a http://{Config.HOST}:{Config.PORT}/")
    app.run(host=Config.HOST, port=Config.PORT, debug=Config.DEBUG)
