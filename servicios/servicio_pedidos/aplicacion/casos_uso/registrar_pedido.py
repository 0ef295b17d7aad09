# servicios/servicio_pedidos/aplicacion/casos_uso/registrar_pedido.py

import datetime
import logging
from typing import Any, Dict, List

from servicios.servicio_pedidos.dominio.pedido import Pedido, ProductoPedido
from servicios.servicio_pedidos.dominio.estado import FlujoEstados
from servicios.servicio_pedidos.dominio.excepciones import DatosDePedidoInvalidosError
from servicios.servicio_pedidos.aplicacion.repositorios.repositorio_pedido_interface import IRepositorioPedido

logger = logging.getLogger(__name__)


def _entero(data: Dict[str, Any], campo: str, defecto: int = 0) -> int:
    valor = data.get(campo)
    if valor is None or valor == "":
        return defecto
    try:
        return int(valor)
    except (TypeError, ValueError):
        raise DatosDePedidoInvalidosError(f"El campo '{campo}' debe ser numérico (recibido: {valor!r}).")


# ==============================================================================
# CASO DE USO: REGISTRAR PEDIDO
# ==============================================================================
class RegistrarPedido:
    """
    Alta de pedidos. Todo pedido nuevo nace en el estado inicial del flujo
    (normalmente 'pendiente'), sin importar lo que venga en la solicitud.
    """
    def __init__(self, repositorio: IRepositorioPedido, flujo: FlujoEstados):
        self.repositorio = repositorio
        self.flujo = flujo

    def _productos(self, items: Any) -> List[ProductoPedido]:
        if items is None:
            return []
        if not isinstance(items, list):
            raise DatosDePedidoInvalidosError("'productos' debe ser una lista.")
        productos = []
        for i, item in enumerate(items):
            if not isinstance(item, dict) or not str(item.get('codigo') or '').strip():
                raise DatosDePedidoInvalidosError(f"El producto #{i + 1} no tiene código.")
            cantidad = _entero(item, 'cantidad', defecto=-1)
            if cantidad <= 0:
                raise DatosDePedidoInvalidosError(f"El producto {item['codigo']} debe tener cantidad positiva.")
            productos.append(ProductoPedido(
                codigo=str(item['codigo']).strip(),
                cantidad=cantidad,
                descripcion=item.get('descripcion') or '',
                ubicacion=item.get('ubicacion') or '',
                recolectado=_entero(item, 'recolectado'),
                motivo=item.get('motivo'),
            ))
        return productos

    def ejecutar(self, data: Dict[str, Any]) -> Pedido:
        """
        :raises DatosDePedidoInvalidosError: faltan campos o hay valores inválidos.
        :raises PedidoDuplicadoError: el código público ya existe.
        """
        pedido_id = str(data.get('pedido_id') or '').strip()
        cliente_id = str(data.get('cliente_id') or '').strip()
        if not pedido_id or not cliente_id:
            raise DatosDePedidoInvalidosError("Faltan campos requeridos (pedido_id, cliente_id).")

        fecha = data.get('fecha')
        if fecha:
            try:
                fecha = datetime.date.fromisoformat(str(fecha)[:10])
            except ValueError:
                raise DatosDePedidoInvalidosError(f"Fecha inválida: {fecha} (formato esperado AAAA-MM-DD)")
        else:
            fecha = datetime.date.today()

        productos = self._productos(data.get('productos'))
        pedido = Pedido(
            pedido_id=pedido_id,
            cliente_id=cliente_id,
            cliente=data.get('cliente'),
            fecha=fecha,
            items=_entero(data, 'items', defecto=len(productos)),
            total_productos=_entero(data, 'total_productos', defecto=sum(p.cantidad for p in productos)),
            vendedor=data.get('vendedor'),
            estado=self.flujo.estado_inicial,
            puntaje=_entero(data, 'puntaje'),
            productos=productos,
        )
        logger.info("Registrando pedido %s con %d productos", pedido_id, len(productos))
        return self.repositorio.crear(pedido)
