# servicios/servicio_pedidos/aplicacion/casos_uso/corregir_estado_pedido.py

import logging
import time
from dataclasses import dataclass, asdict
from typing import Optional

from sqlalchemy.exc import OperationalError

from servicios.servicio_pedidos.dominio.estado import normalizar_estado
from servicios.servicio_pedidos.dominio.excepciones import ConflictoDeEstadoError, ExcepcionDominio
from servicios.servicio_pedidos.aplicacion.casos_uso.consultar_pedidos import ConsultarPedidos
from servicios.servicio_pedidos.aplicacion.casos_uso.cambiar_estado_pedido import CambiarEstadoPedido

logger = logging.getLogger(__name__)


@dataclass
class ResultadoCorreccion:
    exito: bool
    pedido_id: str
    mensaje: str
    estado_anterior: Optional[str] = None
    estado_nuevo: Optional[str] = None
    escrito: bool = False
    codigo_http: int = 200

    def to_dict(self) -> dict:
        data = asdict(self)
        data.pop("codigo_http")
        return data


@dataclass
class CorregirEstadoPedido:
    """
    Corrección manual del estado de un pedido por su código público.

    Flujo: buscar el código -> si no existe, informar sin escribir -> si
    existe, aplicar el estado destino con el ID interno resuelto.

    - estado_origen: si se indica, solo se corrige cuando el pedido está en
      ese estado (precondición).
    - forzar: usa la sobrescritura sin tabla de transiciones.
    - reintentos: ante un cambio concurrente o un bloqueo de la base se
      repite todo el ciclo; si el pedido ya quedó en el destino, se informa
      éxito sin volver a escribir.
    """
    consultas: ConsultarPedidos
    cambios: CambiarEstadoPedido
    reintentos: int = 0
    espera_reintento: float = 0.5

    def ejecutar(self, pedido_id: str, estado_destino: str,
                 estado_origen: Optional[str] = None, forzar: bool = False) -> ResultadoCorreccion:
        intentos = max(0, int(self.reintentos)) + 1
        intento = 0
        while True:
            intento += 1
            try:
                return self._intentar(pedido_id, estado_destino, estado_origen, forzar)
            except ConflictoDeEstadoError as e:
                if intento >= intentos:
                    logger.error("El pedido %s cambió durante la corrección: %s", pedido_id, e.mensaje)
                    return ResultadoCorreccion(False, pedido_id, e.mensaje, estado_anterior=e.actual,
                                               codigo_http=e.codigo_http)
                logger.warning("Intento %d/%d para %s: %s; reintentando", intento, intentos, pedido_id, e.mensaje)
            except OperationalError as e:
                if intento >= intentos:
                    raise
                logger.warning("Intento %d/%d para %s: error de base de datos (%s); reintentando",
                               intento, intentos, pedido_id, e)
            except ExcepcionDominio as e:
                logger.error("No se pudo corregir el pedido %s: %s", pedido_id, e.mensaje)
                return ResultadoCorreccion(False, pedido_id, e.mensaje, codigo_http=e.codigo_http)
            if self.espera_reintento:
                time.sleep(self.espera_reintento)

    def _intentar(self, pedido_id: str, estado_destino: str,
                  estado_origen: Optional[str], forzar: bool) -> ResultadoCorreccion:
        destino = self.cambios.flujo.validar(estado_destino)
        origen = normalizar_estado(estado_origen) if estado_origen else None

        logger.info("Buscando pedido %s...", pedido_id)
        pedido = self.consultas.buscar_por_pedido_id(pedido_id)
        if pedido is None:
            logger.error("No se encontró el pedido %s", pedido_id)
            return ResultadoCorreccion(False, pedido_id, f"No se encontró el pedido {pedido_id}", codigo_http=404)

        anterior = pedido.estado
        logger.info("Pedido %s encontrado: ID %s, estado actual: %s", pedido_id, pedido.id, anterior)

        if anterior == destino:
            return ResultadoCorreccion(
                True, pedido_id,
                f"El pedido {pedido_id} ya está en estado \"{anterior}\", no se requiere actualización",
                estado_anterior=anterior, estado_nuevo=anterior,
            )

        if origen and normalizar_estado(anterior) not in (origen, destino):
            return ResultadoCorreccion(
                False, pedido_id,
                f"El pedido {pedido_id} está en estado \"{anterior}\" y no en \"{origen}\"; no se modifica",
                estado_anterior=anterior, codigo_http=409,
            )

        if forzar:
            # Con estado_origen la precondición se verifica en el mismo UPDATE
            actualizado = self.cambios.forzar(
                pedido.id, destino, estado_esperado=anterior if origen else None)
        elif normalizar_estado(anterior) == destino:
            # Misma etapa guardada con la grafía vieja: solo se reescribe el texto
            actualizado = self.cambios.repositorio.actualizar_estado(
                pedido.id, destino, estado_esperado=anterior)
        else:
            actualizado = self.cambios.cambiar(pedido.id, destino, estado_esperado=anterior)

        return ResultadoCorreccion(
            True, pedido_id,
            f"Pedido {pedido_id} actualizado de \"{anterior}\" a \"{actualizado.estado}\"",
            estado_anterior=anterior, estado_nuevo=actualizado.estado, escrito=True,
        )
