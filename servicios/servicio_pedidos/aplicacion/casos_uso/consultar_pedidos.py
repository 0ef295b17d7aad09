# servicios/servicio_pedidos/aplicacion/casos_uso/consultar_pedidos.py
from dataclasses import dataclass
from typing import List, Optional

from servicios.servicio_pedidos.dominio.pedido import Pedido
from servicios.servicio_pedidos.dominio.estado import FlujoEstados, grafias_estado, normalizar_estado
from servicios.servicio_pedidos.dominio.excepciones import (
    DatosDePedidoInvalidosError,
    PedidoNoEncontradoError,
)
from servicios.servicio_pedidos.aplicacion.repositorios.repositorio_pedido_interface import IRepositorioPedido


@dataclass
class ConsultarPedidos:
    """Consultas de solo lectura sobre pedidos."""
    repositorio: IRepositorioPedido
    flujo: FlujoEstados

    def buscar_por_pedido_id(self, pedido_id: str) -> Optional[Pedido]:
        """
        Busca un pedido por su código público.
        Devuelve None si no existe; el llamador decide qué hacer.
        """
        codigo = (pedido_id or "").strip() if isinstance(pedido_id, str) else ""
        if not codigo:
            raise DatosDePedidoInvalidosError("El código de pedido no puede estar vacío.")
        return self.repositorio.buscar_por_pedido_id(codigo)

    def obtener(self, id_pedido: int) -> Pedido:
        pedido = self.repositorio.obtener_por_id(id_pedido)
        if pedido is None:
            raise PedidoNoEncontradoError(f"No se encontró el pedido con ID {id_pedido}")
        return pedido

    def listar(self, estado: Optional[str] = None, fecha: Optional[str] = None,
               vendedor: Optional[str] = None, pedido_id: Optional[str] = None) -> List[Pedido]:
        grafias = grafias_estado(self.flujo.validar(estado)) if estado else None
        return self.repositorio.listar(
            estado=grafias,
            fecha=fecha or None,
            vendedor=vendedor or None,
            pedido_id=pedido_id or None,
        )

    def contar_por_estado(self) -> dict:
        """Totales por estado normalizado (incluye estados fuera de la enumeración)."""
        totales = {e: 0 for e in self.flujo.estados}
        for p in self.repositorio.listar():
            clave = normalizar_estado(p.estado)
            totales[clave] = totales.get(clave, 0) + 1
        return totales
