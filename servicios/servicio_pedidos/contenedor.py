# servicios/servicio_pedidos/contenedor.py
# ==============================================================================
# CONTENEDOR DE DEPENDENCIAS DEL SERVICIO DE PEDIDOS
# ==============================================================================
# Arma repositorio + flujo de estados + casos de uso a partir de la
# configuración. Lo usan tanto la app Flask como los scripts de mantenimiento,
# así ambos comparten la misma enumeración de estados.
# ==============================================================================
from dataclasses import dataclass, field
from typing import Mapping, Optional

from servicios.servicio_pedidos.dominio.estado import FlujoEstados
from servicios.servicio_pedidos.aplicacion.repositorios.repositorio_pedido_interface import IRepositorioPedido
from servicios.servicio_pedidos.aplicacion.casos_uso.consultar_pedidos import ConsultarPedidos
from servicios.servicio_pedidos.aplicacion.casos_uso.registrar_pedido import RegistrarPedido
from servicios.servicio_pedidos.aplicacion.casos_uso.cambiar_estado_pedido import CambiarEstadoPedido
from servicios.servicio_pedidos.aplicacion.casos_uso.corregir_estado_pedido import CorregirEstadoPedido
from servicios.servicio_pedidos.infraestructura.persistencia.sqlalchemy_repositorio_pedido import SQLAlchemyRepositorioPedido
from servicios.servicio_pedidos.aplicacion.casos_uso.mantenimiento_estados import (
    ActualizarEstadosAutomaticos,
    NormalizarEstados,
)


@dataclass
class ServiciosPedidos:
    repositorio: IRepositorioPedido
    flujo: FlujoEstados = field(default_factory=FlujoEstados)

    def __post_init__(self):
        self.consultas = ConsultarPedidos(repositorio=self.repositorio, flujo=self.flujo)
        self.registro = RegistrarPedido(self.repositorio, self.flujo)
        self.cambios = CambiarEstadoPedido(self.repositorio, self.flujo)
        self.normalizacion = NormalizarEstados(self.repositorio, self.flujo)
        self.automaticos = ActualizarEstadosAutomaticos(self.repositorio, self.cambios)

    def correccion(self, reintentos: int = 0) -> CorregirEstadoPedido:
        return CorregirEstadoPedido(consultas=self.consultas, cambios=self.cambios, reintentos=reintentos)

    @classmethod
    def desde_config(cls, config: Mapping, db_url: Optional[str] = None) -> "ServiciosPedidos":
        repositorio = SQLAlchemyRepositorioPedido(db_url or config.get("SQLALCHEMY_DATABASE_URI"))
        return cls(repositorio=repositorio, flujo=FlujoEstados.desde_config(config))
