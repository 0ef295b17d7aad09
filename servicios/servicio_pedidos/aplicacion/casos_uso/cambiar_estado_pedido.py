# servicios/servicio_pedidos/aplicacion/casos_uso/cambiar_estado_pedido.py

import logging
from typing import Optional

from servicios.servicio_pedidos.dominio.pedido import Pedido
from servicios.servicio_pedidos.dominio.estado import FlujoEstados, normalizar_estado
from servicios.servicio_pedidos.dominio.excepciones import (
    ConflictoDeEstadoError,
    PedidoNoEncontradoError,
)
from servicios.servicio_pedidos.aplicacion.repositorios.repositorio_pedido_interface import IRepositorioPedido

logger = logging.getLogger(__name__)


# ==============================================================================
# CASO DE USO: CAMBIAR ESTADO DE UN PEDIDO
# ==============================================================================
class CambiarEstadoPedido:
    """
    Cambios de estado sobre un pedido identificado por su ID interno.

    - cambiar(): respeta la tabla de transiciones y escribe solo si el estado
      guardado sigue siendo el que se leyó.
    - forzar(): sobrescribe el estado sin mirar el anterior. Es la operación
      de mantenimiento; no deja historial.
    """
    def __init__(self, repositorio: IRepositorioPedido, flujo: FlujoEstados):
        self.repositorio = repositorio
        self.flujo = flujo

    def cambiar(self, id_pedido: int, nuevo_estado: str,
                estado_esperado: Optional[str] = None) -> Pedido:
        """
        :raises EstadoInvalidoError: nuevo_estado no está en la enumeración.
        :raises PedidoNoEncontradoError: el pedido no existe.
        :raises ConflictoDeEstadoError: el estado actual no es el esperado.
        :raises TransicionInvalidaError: la transición no está permitida.
        """
        nuevo = self.flujo.validar(nuevo_estado)

        pedido = self.repositorio.obtener_por_id(id_pedido)
        if pedido is None:
            raise PedidoNoEncontradoError(f"No se encontró el pedido con ID {id_pedido}")

        actual = normalizar_estado(pedido.estado)
        if estado_esperado is not None and normalizar_estado(estado_esperado) != actual:
            raise ConflictoDeEstadoError(id_pedido, normalizar_estado(estado_esperado), actual)

        if actual == nuevo:
            logger.info("Pedido %s ya está en estado '%s'; no se requiere actualización",
                        pedido.pedido_id, nuevo)
            return pedido

        self.flujo.validar_transicion(actual, nuevo)

        # El WHERE sobre el valor leído evita pisar un cambio concurrente
        actualizado = self.repositorio.actualizar_estado(id_pedido, nuevo, estado_esperado=pedido.estado)
        logger.info("Pedido %s: estado '%s' -> '%s'", pedido.pedido_id, pedido.estado, nuevo)
        return actualizado

    def forzar(self, id_pedido: int, estado: str,
               estado_esperado: Optional[str] = None) -> Pedido:
        """
        Ignora la tabla de transiciones. Con estado_esperado la escritura solo
        se aplica si el valor guardado sigue siendo ese.

        :raises EstadoInvalidoError: estado no está en la enumeración.
        :raises PedidoNoEncontradoError: el ID no existe al momento de escribir.
        :raises ConflictoDeEstadoError: el estado guardado ya no es estado_esperado.
        """
        nuevo = self.flujo.validar(estado)
        actualizado = self.repositorio.actualizar_estado(id_pedido, nuevo, estado_esperado=estado_esperado)
        logger.warning("Estado del pedido %s forzado a '%s' (sin validar transición)",
                       actualizado.pedido_id, nuevo)
        return actualizado
