"""
Corrige el estado de un pedido buscándolo por su código público.

Uso:
    python scripts/corregir_estado_pedido.py                       # P0222 -> armado
    python scripts/corregir_estado_pedido.py --pedido P0300 --estado controlado
    python scripts/corregir_estado_pedido.py --desde pendiente     # solo si está pendiente
    python scripts/corregir_estado_pedido.py --forzar              # sin tabla de transiciones

Sale con código 0 si el pedido quedó en el estado pedido, 1 en cualquier otro caso.
"""
import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Permite ejecutar el script directamente desde la raíz del proyecto
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from configuracion import cargar_configuracion  # noqa: E402
from servicios.servicio_pedidos.contenedor import ServiciosPedidos  # noqa: E402

logger = logging.getLogger("corregir_estado_pedido")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Corrige el estado de un pedido por su código.")
    parser.add_argument("--pedido", default="P0222", help="Código público del pedido (default: P0222)")
    parser.add_argument("--estado", default="armado", help="Estado destino (default: armado)")
    parser.add_argument("--desde", default=None,
                        help="Solo corregir si el pedido está actualmente en este estado")
    parser.add_argument("--forzar", action="store_true",
                        help="Sobrescribir sin validar la transición")
    parser.add_argument("--reintentos", type=int, default=0,
                        help="Reintentos ante cambios concurrentes o bloqueos de la base")
    parser.add_argument("--database-url", default=None,
                        help="URL de la base (por defecto la del perfil APP_ENV)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)

    try:
        config = cargar_configuracion()
        servicios = ServiciosPedidos.desde_config(config, db_url=args.database_url)
        resultado = servicios.correccion(reintentos=args.reintentos).ejecutar(
            args.pedido, args.estado, estado_origen=args.desde, forzar=args.forzar,
        )
    except Exception as e:
        logger.exception("Error al actualizar el estado del pedido %s: %s", args.pedido, e)
        return 1

    if resultado.exito:
        logger.info(resultado.mensaje)
        return 0
    logger.error(resultado.mensaje)
    return 1


if __name__ == "__main__":
    sys.exit(main())
