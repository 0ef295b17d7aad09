# inicializar_db.py

from __future__ import annotations

import datetime
import logging
from pathlib import Path
from typing import Optional

from sqlalchemy import (
    create_engine,
    Column,
    Integer,
    String,
    Text,
    Date,
    DateTime,
    ForeignKey,
    func,
)
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool

try:
    # Si tu Config define SQLALCHEMY_DATABASE_URI, lo utilizamos
    from configuracion import Config
    DEFAULT_DB_URI = getattr(Config, "SQLALCHEMY_DATABASE_URI", None)
except Exception:
    Config = None
    DEFAULT_DB_URI = None

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------
# Base ORM
# ----------------------------------------------------------------------
Base = declarative_base()


# ----------------------------------------------------------------------
# Modelos ORM
# ----------------------------------------------------------------------
class PedidoORM(Base):
    """
    Tabla de pedidos.
    - id: clave interna (serial)
    - pedido_id: código visible para operadores, p.ej. 'P0222'
    - estado: texto libre validado en el dominio (la enumeración es configurable)
    """
    __tablename__ = "pedidos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    pedido_id = Column(String, unique=True, nullable=False, index=True)
    cliente_id = Column(String, nullable=False)
    cliente = Column(String, nullable=True)
    fecha = Column(Date, nullable=False, default=datetime.date.today)
    items = Column(Integer, nullable=False, default=0)
    total_productos = Column(Integer, nullable=False, default=0)
    vendedor = Column(String, nullable=True)
    estado = Column(String, nullable=False, default="pendiente", index=True)
    puntaje = Column(Integer, nullable=False, default=0)

    inicio = Column(DateTime, nullable=True)
    finalizado = Column(DateTime, nullable=True)

    creado_en = Column(DateTime, server_default=func.now(), nullable=False)
    actualizado_en = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)


class ProductoPedidoORM(Base):
    """Líneas (productos) de un pedido."""
    __tablename__ = "productos_pedido"

    id = Column(Integer, primary_key=True, autoincrement=True)
    id_pedido = Column(Integer, ForeignKey("pedidos.id", ondelete="CASCADE"), nullable=False, index=True)
    codigo = Column(String, nullable=False, index=True)
    cantidad = Column(Integer, nullable=False)
    descripcion = Column(Text, nullable=False, default="")
    ubicacion = Column(String, nullable=True, default="")
    recolectado = Column(Integer, nullable=False, default=0)
    motivo = Column(Text, nullable=True)


# ----------------------------------------------------------------------
# Helpers DB
# ----------------------------------------------------------------------
def resolve_db_uri(db_uri: Optional[str] = None) -> str:
    """
    Devuelve la URI de la base de datos a usar.
    1) La URI recibida, si viene.
    2) Config.SQLALCHEMY_DATABASE_URI.
    3) sqlite:///data/konecta.sqlite.
    Para SQLite en archivo, crea la carpeta si no existe.
    """
    if not db_uri:
        if DEFAULT_DB_URI:
            db_uri = DEFAULT_DB_URI
        else:
            base_dir = Path(__file__).resolve().parent
            data_dir = base_dir / "data"
            db_uri = f"sqlite:///{(data_dir / 'konecta.sqlite').as_posix()}"
    if db_uri.startswith("sqlite:///") and ":memory:" not in db_uri:
        sqlite_path = db_uri.replace("sqlite:///", "", 1)
        Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)
    return db_uri


def es_sqlite_en_memoria(db_uri: str) -> bool:
    url = make_url(db_uri)
    return url.get_backend_name() == "sqlite" and url.database in (None, "", ":memory:")


def crear_engine(db_uri: str):
    """
    Engine para la URI dada. Una SQLite en memoria vive en una sola conexión,
    así que se comparte entre hilos con StaticPool.
    """
    if es_sqlite_en_memoria(db_uri):
        return create_engine(db_uri, echo=False, future=True, poolclass=StaticPool,
                             connect_args={"check_same_thread": False})
    return create_engine(db_uri, echo=False, future=True)


def get_engine_and_session(db_uri: str):
    engine = crear_engine(db_uri)
    SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    return engine, SessionLocal


def crear_tablas(engine) -> None:
    Base.metadata.create_all(engine)


# ----------------------------------------------------------------------
# Inicialización
# ----------------------------------------------------------------------
def inicializar_base_datos(db_uri: Optional[str] = None, con_ejemplo: bool = True) -> str:
    """
    Crea tablas si no existen y, opcionalmente, inserta un pedido de ejemplo.
    Devuelve la URI utilizada.
    """
    db_uri = resolve_db_uri(db_uri)
    engine, SessionLocal = get_engine_and_session(db_uri)

    crear_tablas(engine)
    logger.info("Tablas creadas/verificadas en: %s", db_uri)

    if not con_ejemplo:
        engine.dispose()
        return db_uri

    session = SessionLocal()
    try:
        if session.query(PedidoORM).filter_by(pedido_id="P0222").count() == 0:
            pedido = PedidoORM(
                pedido_id="P0222",
                cliente_id="C-1001",
                cliente="Cliente de ejemplo",
                fecha=datetime.date.today(),
                items=2,
                total_productos=5,
                vendedor="mostrador",
                estado="pendiente",
                puntaje=5,
            )
            session.add(pedido)
            session.flush()
            session.add_all([
                ProductoPedidoORM(id_pedido=pedido.id, codigo="17061", cantidad=3,
                                  descripcion="Filtro de aceite", ubicacion="A-01"),
                ProductoPedidoORM(id_pedido=pedido.id, codigo="18001", cantidad=2,
                                  descripcion="Pastillas de freno", ubicacion="B-04"),
            ])
            session.commit()
            logger.info("Pedido de ejemplo insertado (P0222).")
    except SQLAlchemyError as e:
        logger.error("Error durante la inicialización de la base de datos: %s", e)
        session.rollback()
        raise
    finally:
        session.close()
        engine.dispose()
    return db_uri


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    inicializar_base_datos()
