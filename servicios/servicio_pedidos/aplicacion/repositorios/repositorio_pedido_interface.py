# servicios/servicio_pedidos/aplicacion/repositorios/repositorio_pedido_interface.py

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union
from servicios.servicio_pedidos.dominio.pedido import Pedido

# Contrato que toda implementación de repositorio de pedidos debe seguir.
class IRepositorioPedido(ABC):

    @abstractmethod
    def crear(self, pedido: Pedido) -> Pedido:
        """
        Inserta un pedido nuevo (y sus productos) y lo devuelve con el ID asignado.
        Lanza PedidoDuplicadoError si el código público ya existe.
        """
        raise NotImplementedError

    @abstractmethod
    def obtener_por_id(self, id_pedido: int) -> Optional[Pedido]:
        """Busca por ID interno, incluyendo los productos del pedido."""
        raise NotImplementedError

    @abstractmethod
    def buscar_por_pedido_id(self, pedido_id: str) -> Optional[Pedido]:
        """Busca por código público (p.ej. 'P0222'). None si no existe."""
        raise NotImplementedError

    @abstractmethod
    def listar(self, estado: Union[str, Sequence[str], None] = None, fecha: Optional[str] = None,
               vendedor: Optional[str] = None, pedido_id: Optional[str] = None) -> List[Pedido]:
        """
        Lista pedidos (sin productos) aplicando los filtros recibidos.
        estado puede ser una grafía o varias; la comparación ignora mayúsculas.
        """
        raise NotImplementedError

    @abstractmethod
    def actualizar_estado(self, id_pedido: int, estado: str,
                          estado_esperado: Optional[str] = None) -> Pedido:
        """
        Escribe el estado en una sola sentencia atómica.

        Sin estado_esperado la escritura es incondicional. Con estado_esperado
        solo se aplica si el valor guardado coincide exactamente; si no,
        lanza ConflictoDeEstadoError. Lanza PedidoNoEncontradoError si el ID
        no existe al momento de escribir.
        """
        raise NotImplementedError

    def ping(self) -> bool:
        """Verifica la conexión con la persistencia."""
        return True
