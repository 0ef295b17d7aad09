# servicios/servicio_pedidos/dominio/pedido.py

import datetime
from dataclasses import dataclass, field
from typing import List, Optional

# Motivos con los que un faltante se da por resuelto sin completar la recolección
MOTIVOS_FALTANTE_RESUELTO = ("no disponible", "transferencia completada")


# ==============================================================================
# ENTIDAD PRODUCTO DE PEDIDO (línea a recolectar)
# ==============================================================================
@dataclass
class ProductoPedido:
    """Representa un producto dentro de un pedido."""
    codigo: str
    cantidad: int
    descripcion: str = ""
    ubicacion: str = ""
    recolectado: int = 0
    motivo: Optional[str] = None
    id: Optional[int] = None

    @property
    def pendiente(self) -> int:
        """Unidades que faltan recolectar."""
        return max(0, self.cantidad - (self.recolectado or 0))

    @property
    def es_faltante(self) -> bool:
        return self.pendiente > 0

    @property
    def faltante_resuelto(self) -> bool:
        """Un faltante queda resuelto si se completó o si el motivo lo cierra."""
        if not self.es_faltante:
            return True
        motivo = (self.motivo or "").lower()
        return any(m in motivo for m in MOTIVOS_FALTANTE_RESUELTO)

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'codigo': self.codigo,
            'cantidad': self.cantidad,
            'descripcion': self.descripcion,
            'ubicacion': self.ubicacion,
            'recolectado': self.recolectado,
            'motivo': self.motivo,
        }


# ==============================================================================
# ENTIDAD PEDIDO
# ==============================================================================
@dataclass
class Pedido:
    """
    Pedido del depósito.
    - id: identificador interno (lo asigna la base)
    - pedido_id: código público que usan los operadores, p.ej. 'P0222'
    """
    pedido_id: str
    cliente_id: str
    estado: str
    id: Optional[int] = None
    cliente: Optional[str] = None
    fecha: Optional[datetime.date] = None
    items: int = 0
    total_productos: int = 0
    vendedor: Optional[str] = None
    puntaje: int = 0
    inicio: Optional[datetime.datetime] = None
    finalizado: Optional[datetime.datetime] = None
    productos: List[ProductoPedido] = field(default_factory=list)

    def todo_recolectado(self) -> bool:
        return all(not p.es_faltante for p in self.productos)

    def faltantes_sin_resolver(self) -> List[ProductoPedido]:
        return [p for p in self.productos if not p.faltante_resuelto]

    def to_dict(self, incluir_productos: bool = True) -> dict:
        data = {
            'id': self.id,
            'pedido_id': self.pedido_id,
            'cliente_id': self.cliente_id,
            'cliente': self.cliente,
            'fecha': self.fecha.isoformat() if self.fecha else None,
            'items': self.items,
            'total_productos': self.total_productos,
            'vendedor': self.vendedor,
            'estado': self.estado,
            'puntaje': self.puntaje,
            'inicio': self.inicio.isoformat() if self.inicio else None,
            'finalizado': self.finalizado.isoformat() if self.finalizado else None,
        }
        if incluir_productos:
            data['productos'] = [p.to_dict() for p in self.productos]
        return data

    def __str__(self):
        return f"Pedido({self.pedido_id}, id={self.id}, estado={self.estado})"
