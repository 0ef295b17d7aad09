import pytest
from sqlalchemy.exc import OperationalError

from scripts.corregir_estado_pedido import main
from servicios.servicio_pedidos.contenedor import ServiciosPedidos
from servicios.servicio_pedidos.dominio.excepciones import ConflictoDeEstadoError
from servicios.servicio_pedidos.infraestructura.persistencia.sqlalchemy_repositorio_pedido import (
    SQLAlchemyRepositorioPedido,
)


@pytest.fixture
def servicios_ejemplo(db_url_con_ejemplo):
    repo = SQLAlchemyRepositorioPedido(db_url_con_ejemplo)
    yield ServiciosPedidos(repositorio=repo)
    repo.engine.dispose()


class TestCorregirEstadoPedido:
    def test_p0222_pendiente_a_armado(self, servicios_ejemplo):
        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "armado")
        assert resultado.exito
        assert resultado.escrito
        assert resultado.estado_anterior == "pendiente"
        assert resultado.estado_nuevo == "armado"
        assert servicios_ejemplo.consultas.buscar_por_pedido_id("P0222").estado == "armado"

    def test_pedido_inexistente_no_escribe(self, servicios_ejemplo):
        antes = [(p.pedido_id, p.estado) for p in servicios_ejemplo.consultas.listar()]
        resultado = servicios_ejemplo.correccion().ejecutar("P9999", "armado")
        assert not resultado.exito
        assert not resultado.escrito
        assert resultado.mensaje == "No se encontró el pedido P9999"
        assert [(p.pedido_id, p.estado) for p in servicios_ejemplo.consultas.listar()] == antes

    def test_ya_en_destino(self, servicios_ejemplo):
        servicios_ejemplo.correccion().ejecutar("P0222", "armado")
        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "armado")
        assert resultado.exito
        assert not resultado.escrito
        assert "no se requiere actualización" in resultado.mensaje

    def test_estado_destino_invalido(self, servicios_ejemplo):
        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "perdido")
        assert not resultado.exito
        assert servicios_ejemplo.consultas.buscar_por_pedido_id("P0222").estado == "pendiente"

    def test_precondicion_de_origen(self, servicios_ejemplo):
        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "armado", estado_origen="en-proceso")
        assert not resultado.exito
        assert resultado.estado_anterior == "pendiente"
        assert servicios_ejemplo.consultas.buscar_por_pedido_id("P0222").estado == "pendiente"

        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "armado", estado_origen="pendiente")
        assert resultado.exito

    def test_transicion_no_permitida_salvo_forzando(self, servicios_ejemplo):
        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "enviado")
        assert not resultado.exito
        assert servicios_ejemplo.consultas.buscar_por_pedido_id("P0222").estado == "pendiente"

        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "enviado", forzar=True)
        assert resultado.exito
        assert servicios_ejemplo.consultas.buscar_por_pedido_id("P0222").estado == "enviado"

    def test_forzar_con_origen_no_pisa_un_cambio_concurrente(self, servicios_ejemplo, monkeypatch):
        buscar_original = servicios_ejemplo.consultas.buscar_por_pedido_id
        cambios_externos = []

        def buscar_y_cambiar_despues(pedido_id):
            pedido = buscar_original(pedido_id)
            if not cambios_externos:
                # Otro operador cambia el pedido entre la lectura y la escritura
                servicios_ejemplo.repositorio.actualizar_estado(pedido.id, "controlado")
                cambios_externos.append(pedido.id)
            return pedido

        monkeypatch.setattr(servicios_ejemplo.consultas, "buscar_por_pedido_id", buscar_y_cambiar_despues)
        resultado = servicios_ejemplo.correccion().ejecutar(
            "P0222", "enviado", estado_origen="pendiente", forzar=True)

        assert not resultado.exito
        assert not resultado.escrito
        assert resultado.codigo_http == 409
        assert resultado.estado_anterior == "controlado"
        assert servicios_ejemplo.repositorio.obtener_por_id(cambios_externos[0]).estado == "controlado"

    def test_forzar_con_origen_reintenta_y_respeta_la_precondicion(self, servicios_ejemplo, monkeypatch):
        buscar_original = servicios_ejemplo.consultas.buscar_por_pedido_id
        cambios_externos = []

        def buscar_y_cambiar_despues(pedido_id):
            pedido = buscar_original(pedido_id)
            if not cambios_externos:
                servicios_ejemplo.repositorio.actualizar_estado(pedido.id, "controlado")
                cambios_externos.append(pedido.id)
            return pedido

        monkeypatch.setattr(servicios_ejemplo.consultas, "buscar_por_pedido_id", buscar_y_cambiar_despues)
        correccion = servicios_ejemplo.correccion(reintentos=1)
        correccion.espera_reintento = 0
        resultado = correccion.ejecutar("P0222", "enviado", estado_origen="pendiente", forzar=True)

        # El segundo intento lee "controlado" y la precondición ya no se cumple
        assert not resultado.exito
        assert "no se modifica" in resultado.mensaje
        assert servicios_ejemplo.repositorio.obtener_por_id(cambios_externos[0]).estado == "controlado"

    def test_grafia_vieja_se_reescribe(self, servicios_ejemplo):
        p = servicios_ejemplo.consultas.buscar_por_pedido_id("P0222")
        servicios_ejemplo.repositorio.actualizar_estado(p.id, "armado, pendiente stock")
        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "armado-pendiente-stock")
        assert resultado.exito
        assert resultado.escrito
        assert servicios_ejemplo.consultas.buscar_por_pedido_id("P0222").estado == "armado-pendiente-stock"

    def test_reintenta_ante_cambio_concurrente(self, servicios_ejemplo, monkeypatch):
        cambiar_original = servicios_ejemplo.cambios.cambiar
        llamadas = []

        def cambiar_con_conflicto(id_pedido, nuevo, estado_esperado=None):
            llamadas.append(nuevo)
            if len(llamadas) == 1:
                raise ConflictoDeEstadoError(id_pedido, estado_esperado, "en-proceso")
            return cambiar_original(id_pedido, nuevo, estado_esperado=estado_esperado)

        monkeypatch.setattr(servicios_ejemplo.cambios, "cambiar", cambiar_con_conflicto)
        correccion = servicios_ejemplo.correccion(reintentos=2)
        correccion.espera_reintento = 0

        resultado = correccion.ejecutar("P0222", "armado")
        assert resultado.exito
        assert len(llamadas) == 2

    def test_conflicto_sin_reintentos(self, servicios_ejemplo, monkeypatch):
        def siempre_conflicto(id_pedido, nuevo, estado_esperado=None):
            raise ConflictoDeEstadoError(id_pedido, estado_esperado, "controlando")

        monkeypatch.setattr(servicios_ejemplo.cambios, "cambiar", siempre_conflicto)
        resultado = servicios_ejemplo.correccion().ejecutar("P0222", "armado")
        assert not resultado.exito
        assert resultado.estado_anterior == "controlando"

    def test_error_de_base_agota_reintentos(self, servicios_ejemplo, monkeypatch):
        def base_caida(pedido_id):
            raise OperationalError("SELECT", {}, Exception("database is locked"))

        monkeypatch.setattr(servicios_ejemplo.consultas, "buscar_por_pedido_id", base_caida)
        correccion = servicios_ejemplo.correccion(reintentos=1)
        correccion.espera_reintento = 0
        with pytest.raises(OperationalError):
            correccion.ejecutar("P0222", "armado")


class TestScriptCorregirEstado:
    def test_defaults_p0222_a_armado(self, db_url_con_ejemplo):
        assert main(["--database-url", db_url_con_ejemplo]) == 0
        repo = SQLAlchemyRepositorioPedido(db_url_con_ejemplo)
        assert repo.buscar_por_pedido_id("P0222").estado == "armado"
        repo.engine.dispose()

    def test_pedido_inexistente_sale_con_1(self, db_url_con_ejemplo):
        assert main(["--database-url", db_url_con_ejemplo, "--pedido", "P9999"]) == 1
        repo = SQLAlchemyRepositorioPedido(db_url_con_ejemplo)
        assert repo.buscar_por_pedido_id("P0222").estado == "pendiente"
        repo.engine.dispose()

    def test_desde_y_forzar(self, db_url_con_ejemplo):
        args = ["--database-url", db_url_con_ejemplo, "--estado", "controlado"]
        assert main(args) == 1
        assert main(args + ["--desde", "en-proceso", "--forzar"]) == 1
        assert main(args + ["--desde", "pendiente", "--forzar"]) == 0

    def test_error_de_conexion_sale_con_1(self, tmp_path):
        url = f"sqlite:///{(tmp_path / 'no_existe' / 'x.sqlite').as_posix()}"
        assert main(["--database-url", url]) == 1
