import datetime

import pytest

from servicios.servicio_pedidos.dominio.pedido import Pedido, ProductoPedido
from servicios.servicio_pedidos.dominio.excepciones import (
    ConflictoDeEstadoError,
    DatosDePedidoInvalidosError,
    EstadoInvalidoError,
    PedidoDuplicadoError,
    PedidoNoEncontradoError,
    TransicionInvalidaError,
)


class TestRegistrarPedido:
    def test_nace_pendiente(self, servicios):
        pedido = servicios.registro.ejecutar({
            "pedido_id": " P0222 ",
            "cliente_id": "C-1",
            "estado": "enviado",
            "productos": [{"codigo": "17061", "cantidad": 3}, {"codigo": "18001", "cantidad": "2"}],
        })
        assert pedido.pedido_id == "P0222"
        assert pedido.estado == "pendiente"
        assert pedido.items == 2
        assert pedido.total_productos == 5

    @pytest.mark.parametrize("data", [
        {"cliente_id": "C-1"},
        {"pedido_id": "P1"},
        {"pedido_id": "P1", "cliente_id": "C-1", "fecha": "ayer"},
        {"pedido_id": "P1", "cliente_id": "C-1", "productos": "17061"},
        {"pedido_id": "P1", "cliente_id": "C-1", "productos": [{"cantidad": 1}]},
        {"pedido_id": "P1", "cliente_id": "C-1", "productos": [{"codigo": "1", "cantidad": 0}]},
    ])
    def test_datos_invalidos(self, servicios, data):
        with pytest.raises(DatosDePedidoInvalidosError):
            servicios.registro.ejecutar(data)

    def test_duplicado(self, nuevo_pedido):
        nuevo_pedido("P0222")
        with pytest.raises(PedidoDuplicadoError):
            nuevo_pedido("P0222")


class TestConsultarPedidos:
    def test_buscar_por_codigo(self, servicios, nuevo_pedido):
        creado = nuevo_pedido("P0222")
        assert servicios.consultas.buscar_por_pedido_id("  P0222").id == creado.id
        assert servicios.consultas.buscar_por_pedido_id("P9999") is None

    @pytest.mark.parametrize("codigo", ["", "   ", None])
    def test_codigo_vacio(self, servicios, codigo):
        with pytest.raises(DatosDePedidoInvalidosError):
            servicios.consultas.buscar_por_pedido_id(codigo)

    def test_obtener_inexistente(self, servicios):
        with pytest.raises(PedidoNoEncontradoError):
            servicios.consultas.obtener(42)

    def test_listar_valida_estado(self, servicios, nuevo_pedido):
        nuevo_pedido("P0001")
        assert len(servicios.consultas.listar(estado="Pendiente")) == 1
        with pytest.raises(EstadoInvalidoError):
            servicios.consultas.listar(estado="perdido")

    def test_listar_incluye_grafias_viejas(self, servicios, nuevo_pedido):
        p1 = nuevo_pedido("P0001")
        p2 = nuevo_pedido("P0002")
        nuevo_pedido("P0003")
        servicios.repositorio.actualizar_estado(p1.id, "armado, pendiente stock")
        servicios.repositorio.actualizar_estado(p2.id, "Armado-Pendiente-Stock")

        listados = servicios.consultas.listar(estado="armado-pendiente-stock")
        assert sorted(p.pedido_id for p in listados) == ["P0001", "P0002"]
        assert servicios.consultas.contar_por_estado()["armado-pendiente-stock"] == len(listados)

    def test_contar_por_estado(self, servicios, nuevo_pedido):
        p = nuevo_pedido("P0001")
        nuevo_pedido("P0002")
        servicios.repositorio.actualizar_estado(p.id, "armado, pendiente stock")
        totales = servicios.consultas.contar_por_estado()
        assert totales["pendiente"] == 1
        assert totales["armado-pendiente-stock"] == 1
        assert totales["enviado"] == 0


class TestCambiarEstado:
    def test_transicion_permitida(self, servicios, nuevo_pedido):
        p = nuevo_pedido()
        actualizado = servicios.cambios.cambiar(p.id, "armado")
        assert actualizado.estado == "armado"

    def test_transicion_no_permitida(self, servicios, nuevo_pedido):
        p = nuevo_pedido()
        with pytest.raises(TransicionInvalidaError):
            servicios.cambios.cambiar(p.id, "enviado")
        assert servicios.consultas.obtener(p.id).estado == "pendiente"

    def test_estado_esperado_distinto(self, servicios, nuevo_pedido):
        p = nuevo_pedido()
        with pytest.raises(ConflictoDeEstadoError):
            servicios.cambios.cambiar(p.id, "armado", estado_esperado="en-proceso")

    def test_mismo_estado_no_escribe(self, servicios, nuevo_pedido):
        p = nuevo_pedido()
        assert servicios.cambios.cambiar(p.id, "pendiente").estado == "pendiente"

    def test_estado_invalido(self, servicios, nuevo_pedido):
        p = nuevo_pedido()
        with pytest.raises(EstadoInvalidoError):
            servicios.cambios.cambiar(p.id, "perdido")

    def test_pedido_inexistente(self, servicios):
        with pytest.raises(PedidoNoEncontradoError):
            servicios.cambios.cambiar(999, "armado")

    def test_forzar_ignora_transiciones(self, servicios, nuevo_pedido):
        p = nuevo_pedido()
        assert servicios.cambios.forzar(p.id, "enviado").estado == "enviado"
        # Desde un estado final solo se sale forzando
        assert servicios.cambios.forzar(p.id, "pendiente").estado == "pendiente"

    def test_forzar_con_estado_esperado(self, servicios, nuevo_pedido):
        p = nuevo_pedido()
        assert servicios.cambios.forzar(p.id, "enviado", estado_esperado="pendiente").estado == "enviado"
        with pytest.raises(ConflictoDeEstadoError):
            servicios.cambios.forzar(p.id, "armado", estado_esperado="pendiente")
        assert servicios.consultas.obtener(p.id).estado == "enviado"

    def test_forzar_valida_enumeracion(self, servicios, nuevo_pedido):
        p = nuevo_pedido()
        with pytest.raises(EstadoInvalidoError):
            servicios.cambios.forzar(p.id, "perdido")
        with pytest.raises(PedidoNoEncontradoError):
            servicios.cambios.forzar(999, "armado")


class TestNormalizarEstados:
    def test_reescribe_grafias_viejas(self, servicios, nuevo_pedido):
        p1 = nuevo_pedido("P0001")
        p2 = nuevo_pedido("P0002")
        p3 = nuevo_pedido("P0003")
        servicios.repositorio.actualizar_estado(p1.id, "armado, pendiente stock")
        servicios.repositorio.actualizar_estado(p2.id, "Armado")
        servicios.repositorio.actualizar_estado(p3.id, "Perdido en depósito")

        resultados = servicios.normalizacion.ejecutar()

        assert {r["pedido_id"]: r["estado_nuevo"] for r in resultados} == {
            "P0001": "armado-pendiente-stock",
            "P0002": "armado",
        }
        assert servicios.consultas.obtener(p1.id).estado == "armado-pendiente-stock"
        # Un estado que no corresponde a ninguno válido no se toca
        assert servicios.consultas.obtener(p3.id).estado == "Perdido en depósito"
        assert servicios.normalizacion.ejecutar() == []


class TestActualizarEstadosAutomaticos:
    def _crear(self, repositorio, pedido_id, estado, productos, finalizado=None):
        return repositorio.crear(Pedido(
            pedido_id=pedido_id, cliente_id="C-1", estado=estado,
            fecha=datetime.date(2025, 3, 1), finalizado=finalizado, productos=productos,
        ))

    def test_reglas(self, servicios):
        repo = servicios.repositorio
        completo = self._crear(repo, "P0001", "pre-finalizado",
                               [ProductoPedido(codigo="1", cantidad=2, recolectado=2)])
        incompleto = self._crear(repo, "P0002", "pre-finalizado",
                                 [ProductoPedido(codigo="1", cantidad=2, recolectado=1)])
        resuelto = self._crear(repo, "P0003", "armado-pendiente-stock",
                               [ProductoPedido(codigo="1", cantidad=2, recolectado=0, motivo="No disponible")])
        con_faltante = self._crear(repo, "P0004", "armado",
                                   [ProductoPedido(codigo="1", cantidad=2, recolectado=1)],
                                   finalizado=datetime.datetime(2025, 3, 1, 12, 0))
        sin_finalizar = self._crear(repo, "P0005", "armado",
                                    [ProductoPedido(codigo="1", cantidad=2, recolectado=1)])

        cambios = servicios.automaticos.ejecutar()

        assert {c["pedido_id"]: c["estado_nuevo"] for c in cambios} == {
            "P0001": "armado",
            "P0003": "armado",
            "P0004": "armado-pendiente-stock",
        }
        assert all(c["motivo"] for c in cambios)
        assert repo.obtener_por_id(completo.id).estado == "armado"
        assert repo.obtener_por_id(incompleto.id).estado == "pre-finalizado"
        assert repo.obtener_por_id(resuelto.id).estado == "armado"
        assert repo.obtener_por_id(con_faltante.id).estado == "armado-pendiente-stock"
        assert repo.obtener_por_id(sin_finalizar.id).estado == "armado"
