from flask import Blueprint, current_app, jsonify, request

from servicios.servicio_pedidos.contenedor import ServiciosPedidos
from servicios.servicio_pedidos.dominio.excepciones import DatosDePedidoInvalidosError, ExcepcionDominio

# Crear el Blueprint de Pedidos
pedidos_bp = Blueprint('pedidos_bp', __name__, url_prefix='/api/v1/pedidos')


def _servicios() -> ServiciosPedidos:
    """Servicios del pedido registrados por crear_app()."""
    return current_app.extensions['servicios_pedidos']


def _json_body() -> dict:
    data = request.get_json(force=True, silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise DatosDePedidoInvalidosError("El cuerpo debe ser un objeto JSON.")
    return data


def _bool(valor) -> bool:
    if isinstance(valor, bool):
        return valor
    return str(valor or '').strip().lower() in ('1', 'true', 'yes', 'si')


@pedidos_bp.errorhandler(ExcepcionDominio)
def _error_dominio(e: ExcepcionDominio):
    current_app.logger.info("Pedidos: %s (%s)", e.mensaje, e.__class__.__name__)
    return jsonify({"ok": False, "error": e.mensaje}), e.codigo_http


# --------------------------------------------------------------------
# CONSULTAS
# --------------------------------------------------------------------
@pedidos_bp.route('', methods=['GET'])
def listar_pedidos():
    pedidos = _servicios().consultas.listar(
        estado=(request.args.get('estado') or '').strip() or None,
        fecha=(request.args.get('fecha') or '').strip() or None,
        vendedor=(request.args.get('vendedor') or '').strip() or None,
        pedido_id=(request.args.get('pedido_id') or '').strip() or None,
    )
    return jsonify([p.to_dict(incluir_productos=False) for p in pedidos]), 200


@pedidos_bp.route('/<int:id_pedido>', methods=['GET'])
def obtener_pedido(id_pedido: int):
    pedido = _servicios().consultas.obtener(id_pedido)
    return jsonify(pedido.to_dict()), 200


@pedidos_bp.route('/codigo/<string:pedido_id>', methods=['GET'])
def buscar_por_codigo(pedido_id: str):
    pedido = _servicios().consultas.buscar_por_pedido_id(pedido_id)
    if pedido is None:
        return jsonify({"ok": False, "error": f"No se encontró el pedido {pedido_id}"}), 404
    return jsonify(pedido.to_dict()), 200


@pedidos_bp.route('/estados', methods=['GET'])
def listar_estados():
    """Enumeración configurada, tabla de transiciones y totales por estado."""
    servicios = _servicios()
    data = servicios.flujo.to_dict()
    data['totales'] = servicios.consultas.contar_por_estado()
    return jsonify(data), 200


# --------------------------------------------------------------------
# ALTA
# --------------------------------------------------------------------
@pedidos_bp.route('', methods=['POST'])
def crear_pedido():
    pedido = _servicios().registro.ejecutar(_json_body())
    return jsonify(pedido.to_dict()), 201


# --------------------------------------------------------------------
# CAMBIOS DE ESTADO
# --------------------------------------------------------------------
@pedidos_bp.route('/<int:id_pedido>/estado', methods=['PUT', 'PATCH'])
def cambiar_estado(id_pedido: int):
    data = _json_body()
    estado = data.get('estado')
    if not estado:
        return jsonify({"ok": False, "error": "Debe indicar el estado a establecer"}), 400
    pedido = _servicios().cambios.cambiar(
        id_pedido, estado, estado_esperado=data.get('estado_esperado'),
    )
    return jsonify(pedido.to_dict()), 200


@pedidos_bp.route('/<int:id_pedido>/estado/forzar', methods=['POST'])
def forzar_estado(id_pedido: int):
    data = _json_body()
    estado = data.get('estado')
    if not estado:
        return jsonify({"ok": False, "error": "Debe indicar el estado a establecer"}), 400
    pedido = _servicios().cambios.forzar(id_pedido, estado)
    return jsonify(pedido.to_dict()), 200


@pedidos_bp.route('/codigo/<string:pedido_id>/corregir', methods=['POST'])
def corregir_estado(pedido_id: str):
    data = _json_body()
    estado = data.get('estado')
    if not estado:
        return jsonify({"ok": False, "error": "Debe indicar el estado a establecer"}), 400
    resultado = _servicios().correccion().ejecutar(
        pedido_id, estado,
        estado_origen=data.get('desde'),
        forzar=_bool(data.get('forzar')),
    )
    return jsonify(resultado.to_dict()), resultado.codigo_http


# --------------------------------------------------------------------
# MANTENIMIENTO MASIVO
# --------------------------------------------------------------------
@pedidos_bp.route('/corregir-estados', methods=['POST'])
def corregir_estados():
    resultados = _servicios().normalizacion.ejecutar()
    return jsonify({
        "ok": True,
        "mensaje": f"Se corrigieron {len(resultados)} pedidos con estados inconsistentes.",
        "corregidos": len(resultados),
        "resultados": resultados,
    }), 200


@pedidos_bp.route('/actualizar-estados', methods=['POST'])
def actualizar_estados():
    cambios = _servicios().automaticos.ejecutar()
    return jsonify({
        "ok": True,
        "mensaje": f"Se actualizaron {len(cambios)} pedidos automáticamente.",
        "actualizados": len(cambios),
        "resultados": cambios,
    }), 200
