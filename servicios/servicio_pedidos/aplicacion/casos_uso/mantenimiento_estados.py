# servicios/servicio_pedidos/aplicacion/casos_uso/mantenimiento_estados.py

import logging
from typing import Dict, List, Optional

from servicios.servicio_pedidos.dominio.pedido import Pedido
from servicios.servicio_pedidos.dominio.estado import EstadoPedido, FlujoEstados, normalizar_estado
from servicios.servicio_pedidos.dominio.excepciones import (
    ConflictoDeEstadoError,
    EstadoInvalidoError,
    PedidoNoEncontradoError,
    TransicionInvalidaError,
)
from servicios.servicio_pedidos.aplicacion.repositorios.repositorio_pedido_interface import IRepositorioPedido
from servicios.servicio_pedidos.aplicacion.casos_uso.cambiar_estado_pedido import CambiarEstadoPedido

logger = logging.getLogger(__name__)

ARMADO = EstadoPedido.ARMADO.value
PRE_FINALIZADO = EstadoPedido.PRE_FINALIZADO.value
PENDIENTE_STOCK = EstadoPedido.ARMADO_PENDIENTE_STOCK.value


def _cambio(pedido: Pedido, nuevo: str, motivo: Optional[str] = None) -> Dict[str, str]:
    data = {
        'pedido_id': pedido.pedido_id,
        'estado_anterior': pedido.estado,
        'estado_nuevo': nuevo,
    }
    if motivo:
        data['motivo'] = motivo
    return data


# ==============================================================================
# CASO DE USO: NORMALIZAR GRAFÍAS DE ESTADO
# ==============================================================================
class NormalizarEstados:
    """
    Reescribe los estados guardados con grafías viejas
    ('armado, pendiente stock' -> 'armado-pendiente-stock').
    Solo toca pedidos cuyo estado normalizado es válido.
    """
    def __init__(self, repositorio: IRepositorioPedido, flujo: FlujoEstados):
        self.repositorio = repositorio
        self.flujo = flujo

    def ejecutar(self) -> List[Dict[str, str]]:
        logger.info("Iniciando corrección de estados inconsistentes de pedidos")
        resultados = []
        for pedido in self.repositorio.listar():
            nuevo = normalizar_estado(pedido.estado)
            if nuevo == pedido.estado:
                continue
            if not self.flujo.es_valido(nuevo):
                logger.warning("Pedido %s: estado '%s' no corresponde a ningún estado válido",
                               pedido.pedido_id, pedido.estado)
                continue
            try:
                self.repositorio.actualizar_estado(pedido.id, nuevo, estado_esperado=pedido.estado)
            except (ConflictoDeEstadoError, PedidoNoEncontradoError) as e:
                logger.warning("Pedido %s cambió mientras se normalizaba: %s", pedido.pedido_id, e.mensaje)
                continue
            logger.info("Corrigiendo formato de estado para pedido %s de \"%s\" a \"%s\"",
                        pedido.pedido_id, pedido.estado, nuevo)
            resultados.append(_cambio(pedido, nuevo))
        logger.info("Se corrigieron %d pedidos con estados inconsistentes.", len(resultados))
        return resultados


# ==============================================================================
# CASO DE USO: ACTUALIZACIÓN AUTOMÁTICA DE ESTADOS
# ==============================================================================
class ActualizarEstadosAutomaticos:
    """
    Recalcula estados a partir de la recolección de productos:

    - pre-finalizado con todo recolectado            -> armado
    - armado-pendiente-stock sin faltantes abiertos  -> armado
    - armado finalizado con faltantes abiertos       -> armado-pendiente-stock

    Cada cambio pasa por la tabla de transiciones; lo que no está permitido
    o cambió mientras tanto se omite.
    """
    def __init__(self, repositorio: IRepositorioPedido, cambios: CambiarEstadoPedido):
        self.repositorio = repositorio
        self.cambios = cambios

    def _destino(self, pedido: Pedido) -> Optional[str]:
        estado = normalizar_estado(pedido.estado)
        if estado == PRE_FINALIZADO and pedido.todo_recolectado():
            return ARMADO
        if estado == PENDIENTE_STOCK and not pedido.faltantes_sin_resolver():
            return ARMADO
        if estado == ARMADO and pedido.finalizado and pedido.faltantes_sin_resolver():
            return PENDIENTE_STOCK
        return None

    def ejecutar(self) -> List[Dict[str, str]]:
        logger.info("Iniciando actualización automática de estados de pedidos")
        cambios = []
        candidatos = (PRE_FINALIZADO, PENDIENTE_STOCK, ARMADO)
        for resumen in self.repositorio.listar():
            if normalizar_estado(resumen.estado) not in candidatos:
                continue
            pedido = self.repositorio.obtener_por_id(resumen.id)
            if pedido is None:
                continue
            destino = self._destino(pedido)
            if destino is None:
                continue
            try:
                self.cambios.cambiar(pedido.id, destino, estado_esperado=pedido.estado)
            except (ConflictoDeEstadoError, EstadoInvalidoError, TransicionInvalidaError,
                    PedidoNoEncontradoError) as e:
                logger.warning("Pedido %s omitido: %s", pedido.pedido_id, e.mensaje)
                continue
            faltantes = len(pedido.faltantes_sin_resolver())
            motivo = (f"{faltantes} productos con faltantes sin resolver" if faltantes
                      else "todos los productos recolectados o resueltos")
            cambios.append(_cambio(pedido, destino, motivo))
        logger.info("Se actualizaron %d pedidos automáticamente.", len(cambios))
        return cambios
