# servicios/servicio_pedidos/infraestructura/persistencia/sqlalchemy_repositorio_pedido.py
from __future__ import annotations

import datetime
import logging
from typing import List, Optional, Sequence, Union

from sqlalchemy import func, select, text, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from configuracion import Config
from inicializar_db import PedidoORM, ProductoPedidoORM, crear_engine
from servicios.servicio_pedidos.dominio.pedido import Pedido, ProductoPedido
from servicios.servicio_pedidos.dominio.excepciones import (
    ConflictoDeEstadoError,
    DatosDePedidoInvalidosError,
    PedidoDuplicadoError,
    PedidoNoEncontradoError,
)
from servicios.servicio_pedidos.aplicacion.repositorios.repositorio_pedido_interface import IRepositorioPedido

logger = logging.getLogger(__name__)


class SQLAlchemyRepositorioPedido(IRepositorioPedido):
    """Repositorio de pedidos sobre SQLAlchemy (SQLite en desarrollo, Postgres en producción)."""

    def __init__(self, db_url: Optional[str] = None):
        self.db_url = db_url or Config.SQLALCHEMY_DATABASE_URI
        self.engine = crear_engine(self.db_url)
        self.Session = sessionmaker(bind=self.engine, autoflush=False, autocommit=False,
                                    expire_on_commit=False, future=True)

    # ------------------------------------------------------------------
    # Mapeo ORM -> dominio
    # ------------------------------------------------------------------
    def _producto_to_domain(self, row: ProductoPedidoORM) -> ProductoPedido:
        return ProductoPedido(
            id=row.id,
            codigo=row.codigo,
            cantidad=row.cantidad or 0,
            descripcion=row.descripcion or '',
            ubicacion=row.ubicacion or '',
            recolectado=row.recolectado or 0,
            motivo=row.motivo,
        )

    def _to_domain(self, row: PedidoORM, productos: Optional[List[ProductoPedidoORM]] = None) -> Pedido:
        return Pedido(
            id=row.id,
            pedido_id=row.pedido_id,
            cliente_id=row.cliente_id,
            cliente=row.cliente,
            fecha=row.fecha,
            items=row.items or 0,
            total_productos=row.total_productos or 0,
            vendedor=row.vendedor,
            estado=row.estado,
            puntaje=row.puntaje or 0,
            inicio=row.inicio,
            finalizado=row.finalizado,
            productos=[self._producto_to_domain(p) for p in (productos or [])],
        )

    def _cargar(self, s, id_pedido: int) -> Optional[Pedido]:
        row = s.get(PedidoORM, id_pedido)
        if row is None:
            return None
        productos = (
            s.query(ProductoPedidoORM)
            .filter_by(id_pedido=row.id)
            .order_by(ProductoPedidoORM.id)
            .all()
        )
        return self._to_domain(row, productos)

    # ------------------------------------------------------------------
    # Contrato IRepositorioPedido
    # ------------------------------------------------------------------
    def crear(self, pedido: Pedido) -> Pedido:
        with self.Session() as s:
            existe = s.query(PedidoORM.id).filter_by(pedido_id=pedido.pedido_id).first()
            if existe:
                raise PedidoDuplicadoError(pedido.pedido_id)
            row = PedidoORM(
                pedido_id=pedido.pedido_id,
                cliente_id=pedido.cliente_id,
                cliente=pedido.cliente,
                fecha=pedido.fecha or datetime.date.today(),
                items=pedido.items,
                total_productos=pedido.total_productos,
                vendedor=pedido.vendedor,
                estado=pedido.estado,
                puntaje=pedido.puntaje,
                inicio=pedido.inicio,
                finalizado=pedido.finalizado,
            )
            s.add(row)
            try:
                s.flush()
                for p in pedido.productos:
                    s.add(ProductoPedidoORM(
                        id_pedido=row.id,
                        codigo=p.codigo,
                        cantidad=p.cantidad,
                        descripcion=p.descripcion or '',
                        ubicacion=p.ubicacion or '',
                        recolectado=p.recolectado or 0,
                        motivo=p.motivo,
                    ))
                s.commit()
            except IntegrityError:
                # Otro proceso insertó el mismo código entre la verificación y el INSERT
                s.rollback()
                raise PedidoDuplicadoError(pedido.pedido_id)
            logger.info("Pedido creado con ID: %s, pedido_id: %s", row.id, row.pedido_id)
            return self._cargar(s, row.id)

    def obtener_por_id(self, id_pedido: int) -> Optional[Pedido]:
        with self.Session() as s:
            return self._cargar(s, id_pedido)

    def buscar_por_pedido_id(self, pedido_id: str) -> Optional[Pedido]:
        with self.Session() as s:
            row = s.query(PedidoORM).filter_by(pedido_id=pedido_id).one_or_none()
            return self._cargar(s, row.id) if row else None

    def listar(self, estado: Union[str, Sequence[str], None] = None, fecha: Optional[str] = None,
               vendedor: Optional[str] = None, pedido_id: Optional[str] = None) -> List[Pedido]:
        stmt = select(PedidoORM)
        if estado:
            # Una o varias grafías del estado; sin distinguir mayúsculas
            grafias = [estado] if isinstance(estado, str) else list(estado)
            stmt = stmt.where(
                func.lower(func.trim(PedidoORM.estado)).in_([g.strip().lower() for g in grafias])
            )
        if fecha:
            try:
                dia = datetime.date.fromisoformat(str(fecha)[:10])
            except ValueError:
                raise DatosDePedidoInvalidosError(f"Fecha inválida: {fecha} (formato esperado AAAA-MM-DD)")
            stmt = stmt.where(PedidoORM.fecha == dia)
        if vendedor:
            stmt = stmt.where(PedidoORM.vendedor.ilike(f"%{vendedor}%"))
        if pedido_id:
            stmt = stmt.where(PedidoORM.pedido_id.ilike(f"%{pedido_id}%"))
        stmt = stmt.order_by(PedidoORM.id.desc())
        with self.Session() as s:
            rows = s.execute(stmt).scalars().all()
        return [self._to_domain(r) for r in rows]

    def actualizar_estado(self, id_pedido: int, estado: str,
                          estado_esperado: Optional[str] = None) -> Pedido:
        stmt = update(PedidoORM).where(PedidoORM.id == id_pedido)
        if estado_esperado is not None:
            stmt = stmt.where(PedidoORM.estado == estado_esperado)
        stmt = stmt.values(estado=estado).execution_options(synchronize_session=False)

        with self.Session() as s:
            with s.begin():
                resultado = s.execute(stmt)
                if resultado.rowcount == 0:
                    actual = s.execute(
                        select(PedidoORM.estado).where(PedidoORM.id == id_pedido)
                    ).scalar_one_or_none()
                    if actual is None:
                        raise PedidoNoEncontradoError(f"No se encontró el pedido con ID {id_pedido}")
                    raise ConflictoDeEstadoError(id_pedido, estado_esperado, actual)
            return self._cargar(s, id_pedido)

    def ping(self) -> bool:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
