# servicios/servicio_pedidos/dominio/estado.py

import enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from servicios.servicio_pedidos.dominio.excepciones import (
    EstadoInvalidoError,
    TransicionInvalidaError,
)


# ==============================================================================
# ESTADOS DE UN PEDIDO
# ==============================================================================
class EstadoPedido(str, enum.Enum):
    PENDIENTE = "pendiente"
    EN_PROCESO = "en-proceso"
    PRE_FINALIZADO = "pre-finalizado"
    ARMADO = "armado"
    ARMADO_PENDIENTE_STOCK = "armado-pendiente-stock"
    CONTROLANDO = "controlando"
    CONTROLADO = "controlado"
    ENVIADO = "enviado"


ESTADOS_POR_DEFECTO: Tuple[str, ...] = tuple(e.value for e in EstadoPedido)

TRANSICIONES_POR_DEFECTO: Dict[str, FrozenSet[str]] = {
    "pendiente": frozenset({"en-proceso", "armado"}),
    "en-proceso": frozenset({"pendiente", "pre-finalizado", "armado", "armado-pendiente-stock"}),
    "pre-finalizado": frozenset({"armado", "armado-pendiente-stock"}),
    "armado": frozenset({"armado-pendiente-stock", "controlando", "enviado"}),
    "armado-pendiente-stock": frozenset({"armado"}),
    "controlando": frozenset({"armado", "controlado"}),
    "controlado": frozenset({"enviado"}),
    "enviado": frozenset(),
}

# Grafías que quedaron guardadas en la base antes de unificar el formato
_ALIAS_LEGADOS = {
    "armado, pendiente stock": "armado-pendiente-stock",
    "armado,pendiente stock": "armado-pendiente-stock",
    "armado pendiente stock": "armado-pendiente-stock",
}


def normalizar_estado(valor: Optional[str]) -> str:
    """
    Lleva un estado a su forma canónica: minúsculas, sin espacios en los
    extremos y con guiones en lugar de comas o espacios internos.

    >>> normalizar_estado("Armado, pendiente stock")
    'armado-pendiente-stock'
    """
    texto = " ".join(str(valor or "").split()).lower()
    if texto in _ALIAS_LEGADOS:
        return _ALIAS_LEGADOS[texto]
    return texto.replace(", ", "-").replace(",", "-").replace(" ", "-")


def grafias_estado(estado: str) -> Tuple[str, ...]:
    """
    Formas en minúsculas con las que un estado puede estar guardado: la
    canónica, con espacios en lugar de guiones y los alias legados.

    >>> grafias_estado("armado-pendiente-stock")[:2]
    ('armado-pendiente-stock', 'armado pendiente stock')
    """
    canonico = normalizar_estado(estado)
    formas = [canonico, canonico.replace("-", " ")]
    formas.extend(alias for alias, destino in _ALIAS_LEGADOS.items() if destino == canonico)
    return tuple(dict.fromkeys(formas))


def parsear_transiciones(texto: str) -> Dict[str, FrozenSet[str]]:
    """
    Interpreta el formato 'origen>dest1|dest2;origen2>dest3'.
    Un origen sin destinos ('enviado>') se declara como estado final.
    """
    tabla: Dict[str, set] = {}
    for bloque in (texto or "").split(";"):
        bloque = bloque.strip()
        if not bloque:
            continue
        if ">" not in bloque:
            raise ValueError(f"Transición mal formada: {bloque!r} (se esperaba 'origen>destino')")
        origen, destinos = bloque.split(">", 1)
        origen = normalizar_estado(origen)
        if not origen:
            raise ValueError(f"Transición sin estado de origen: {bloque!r}")
        tabla.setdefault(origen, set()).update(
            normalizar_estado(d) for d in destinos.split("|") if d.strip()
        )
    return {k: frozenset(v) for k, v in tabla.items()}


# ==============================================================================
# FLUJO DE ESTADOS (enumeración + tabla de transiciones)
# ==============================================================================
class FlujoEstados:
    """
    Enumeración de estados válidos y transiciones permitidas entre ellos.

    Si no se indica enumeración se usan todos los estados conocidos. Si no se
    indica tabla se usa TRANSICIONES_POR_DEFECTO, recortada a los estados de
    la enumeración.
    """

    def __init__(self,
                 estados: Optional[Iterable[str]] = None,
                 transiciones: Optional[Mapping[str, Iterable[str]]] = None):
        if estados is None:
            estados = ESTADOS_POR_DEFECTO
        vistos: List[str] = []
        for e in estados:
            n = normalizar_estado(e)
            if n and n not in vistos:
                vistos.append(n)
        if not vistos:
            raise ValueError("La enumeración de estados no puede estar vacía")
        self._estados: Tuple[str, ...] = tuple(vistos)

        if transiciones is None:
            transiciones = TRANSICIONES_POR_DEFECTO
        tabla: Dict[str, FrozenSet[str]] = {}
        for origen, destinos in transiciones.items():
            origen = normalizar_estado(origen)
            if origen not in self._estados:
                continue
            tabla[origen] = frozenset(
                d for d in (normalizar_estado(x) for x in destinos)
                if d in self._estados and d != origen
            )
        self._transiciones = tabla

    @classmethod
    def desde_config(cls, config: Mapping) -> "FlujoEstados":
        """Construye el flujo a partir de ESTADOS_PEDIDO / TRANSICIONES_PEDIDO."""
        transiciones = config.get("TRANSICIONES_PEDIDO")
        if isinstance(transiciones, str):
            transiciones = parsear_transiciones(transiciones)
        return cls(estados=config.get("ESTADOS_PEDIDO"), transiciones=transiciones)

    @property
    def estados(self) -> Tuple[str, ...]:
        return self._estados

    @property
    def estado_inicial(self) -> str:
        if EstadoPedido.PENDIENTE.value in self._estados:
            return EstadoPedido.PENDIENTE.value
        return self._estados[0]

    def es_valido(self, estado: Optional[str]) -> bool:
        return normalizar_estado(estado) in self._estados

    def validar(self, estado: Optional[str]) -> str:
        """Devuelve el estado normalizado o lanza EstadoInvalidoError."""
        n = normalizar_estado(estado)
        if n not in self._estados:
            raise EstadoInvalidoError(estado, self._estados)
        return n

    def siguientes(self, estado: str) -> Tuple[str, ...]:
        destinos = self._transiciones.get(normalizar_estado(estado), frozenset())
        return tuple(e for e in self._estados if e in destinos)

    def puede_pasar(self, actual: str, nuevo: str) -> bool:
        return normalizar_estado(nuevo) in self.siguientes(actual)

    def validar_transicion(self, actual: str, nuevo: str) -> None:
        if not self.puede_pasar(actual, nuevo):
            raise TransicionInvalidaError(
                normalizar_estado(actual), normalizar_estado(nuevo), self.siguientes(actual)
            )

    def to_dict(self) -> dict:
        return {
            "estados": list(self._estados),
            "estado_inicial": self.estado_inicial,
            "transiciones": {e: list(self.siguientes(e)) for e in self._estados},
        }
