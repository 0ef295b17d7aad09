from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

salud_bp = Blueprint('salud_bp', __name__, url_prefix='/api/v1')


@salud_bp.route('/health', methods=['GET'])
def health():
    """Estado del servicio y de la conexión a la base."""
    servicios = current_app.extensions['servicios_pedidos']
    try:
        servicios.repositorio.ping()
    except SQLAlchemyError as e:
        current_app.logger.error("Health check: base de datos no disponible: %s", e)
        return jsonify({"ok": False, "status": "degraded", "database": "unavailable"}), 503
    return jsonify({
        "ok": True,
        "status": "healthy",
        "database": "connected",
        "app_env": current_app.config.get("APP_ENV"),
    }), 200
