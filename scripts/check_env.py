import os
import sys
from pathlib import Path

from dotenv import load_dotenv, find_dotenv

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


def mask(v: str | None, keep: int = 4) -> str:
    if not v:
        return "<EMPTY>"
    if len(v) <= keep * 2:
        return v[0:keep] + "…"
    return v[0:keep] + "…" + v[-keep:]


def main() -> None:
    try:
        load_dotenv(find_dotenv(usecwd=True))
    except Exception:
        pass
    keys = [
        "APP_ENV",
        "DATABASE_URL",
        "TEST_DATABASE_URL",
        "SQLALCHEMY_DATABASE_URI",
        "HOST",
        "PORT",
        "DEBUG",
        "LOG_LEVEL",
        "ESTADOS_PEDIDO",
        "TRANSICIONES_PEDIDO",
        "SECRET_KEY",
    ]
    print("Loaded environment summary:")
    for k in keys:
        v = os.getenv(k)
        print(f"- {k}: {'SET' if v else 'MISSING'} ({mask(v) if v else ''})")

    from configuracion import cargar_configuracion
    from servicios.servicio_pedidos.dominio.estado import FlujoEstados

    try:
        config = cargar_configuracion()
        flujo = FlujoEstados.desde_config(config)
    except ValueError as e:
        print(f"Configuración inválida: {e}")
        sys.exit(1)
    print(f"Perfil: {config['APP_ENV']} (puerto {config['PORT']})")
    print(f"Base de datos: {mask(config['SQLALCHEMY_DATABASE_URI'], keep=12)}")
    print(f"Estados: {', '.join(flujo.estados)}")


if __name__ == "__main__":
    main()
