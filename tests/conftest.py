"""
Fixtures compartidas: base SQLite temporaria por test, repositorio,
servicios de pedidos y cliente Flask.
"""
import pytest

from app import crear_app
from inicializar_db import inicializar_base_datos
from servicios.servicio_pedidos.contenedor import ServiciosPedidos
from servicios.servicio_pedidos.infraestructura.persistencia.sqlalchemy_repositorio_pedido import (
    SQLAlchemyRepositorioPedido,
)


@pytest.fixture
def db_url(tmp_path):
    """Base vacía con las tablas creadas."""
    url = f"sqlite:///{(tmp_path / 'pedidos_test.sqlite').as_posix()}"
    inicializar_base_datos(url, con_ejemplo=False)
    return url


@pytest.fixture
def db_url_con_ejemplo(tmp_path):
    """Base con el pedido de ejemplo P0222 en 'pendiente'."""
    url = f"sqlite:///{(tmp_path / 'pedidos_ejemplo.sqlite').as_posix()}"
    inicializar_base_datos(url, con_ejemplo=True)
    return url


@pytest.fixture
def repositorio(db_url):
    repo = SQLAlchemyRepositorioPedido(db_url)
    yield repo
    repo.engine.dispose()


@pytest.fixture
def servicios(repositorio):
    return ServiciosPedidos(repositorio=repositorio)


@pytest.fixture
def nuevo_pedido(servicios):
    """Crea pedidos a través del caso de uso de alta."""
    def _crear(pedido_id="P0222", **extra):
        data = {"pedido_id": pedido_id, "cliente_id": "C-1001", "vendedor": "mostrador"}
        data.update(extra)
        return servicios.registro.ejecutar(data)
    return _crear


@pytest.fixture
def app(db_url):
    app = crear_app({"TESTING": True, "SQLALCHEMY_DATABASE_URI": db_url})
    yield app
    app.extensions["servicios_pedidos"].repositorio.engine.dispose()


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
