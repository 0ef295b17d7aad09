class ExcepcionDominio(Exception):
    """Clase base para todas las excepciones de dominio del servicio de pedidos."""
    codigo_http = 400

    def __init__(self, mensaje="Error en el servicio de pedidos."):
        self.mensaje = mensaje
        super().__init__(self.mensaje)


class PedidoNoEncontradoError(ExcepcionDominio):
    """El pedido no existe (por código público o por ID interno)."""
    codigo_http = 404

    def __init__(self, mensaje="El pedido solicitado no fue encontrado."):
        super().__init__(mensaje)


class DatosDePedidoInvalidosError(ExcepcionDominio):
    """Los datos de entrada para un pedido son inválidos."""

    def __init__(self, mensaje="Los datos de pedido proporcionados son inválidos."):
        super().__init__(mensaje)


class EstadoInvalidoError(ExcepcionDominio):
    """El estado no pertenece a la enumeración configurada."""

    def __init__(self, estado, validos=()):
        self.estado = estado
        self.validos = tuple(validos)
        mensaje = f"Estado inválido: {estado}."
        if self.validos:
            mensaje += f" Los estados válidos son: {', '.join(self.validos)}"
        super().__init__(mensaje)


class TransicionInvalidaError(ExcepcionDominio):
    """La tabla de transiciones no permite pasar de un estado a otro."""
    codigo_http = 409

    def __init__(self, actual, nuevo, permitidos=()):
        self.actual = actual
        self.nuevo = nuevo
        self.permitidos = tuple(permitidos)
        mensaje = f"No se permite pasar de '{actual}' a '{nuevo}'."
        if self.permitidos:
            mensaje += f" Desde '{actual}' se puede pasar a: {', '.join(self.permitidos)}"
        else:
            mensaje += f" '{actual}' es un estado final."
        super().__init__(mensaje)


class ConflictoDeEstadoError(ExcepcionDominio):
    """El estado almacenado no es el esperado (otro proceso lo cambió)."""
    codigo_http = 409

    def __init__(self, id_pedido, esperado, actual):
        self.id_pedido = id_pedido
        self.esperado = esperado
        self.actual = actual
        super().__init__(
            f"El pedido {id_pedido} está en estado '{actual}', se esperaba '{esperado}'."
        )


class PedidoDuplicadoError(ExcepcionDominio):
    """Ya existe un pedido con el mismo código público."""
    codigo_http = 409

    def __init__(self, pedido_id):
        self.pedido_id = pedido_id
        super().__init__(f"Ya existe un pedido con ID {pedido_id}")
