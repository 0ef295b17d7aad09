# configuracion.py
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

try:
    # Cargar variables de entorno si existe .env (opcional)
    from dotenv import load_dotenv, find_dotenv
    load_dotenv(find_dotenv(usecwd=True))
except Exception:
    pass


BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"

# Perfiles de despliegue: antes eran lanzadores separados (index / index-prueba1)
PERFILES: Dict[str, Dict[str, Any]] = {
    "produccion": {
        "PORT": 5000,
        "DB_ENV": "DATABASE_URL",
        "DB_ARCHIVO": "konecta.sqlite",
    },
    "prueba1": {
        "PORT": 5001,
        "DB_ENV": "TEST_DATABASE_URL",
        "DB_ARCHIVO": "konecta_prueba1.sqlite",
    },
}

PERFIL_POR_DEFECTO = "produccion"


def _bool(valor: Optional[str], defecto: bool = False) -> bool:
    if valor is None or str(valor).strip() == "":
        return defecto
    return str(valor).strip().lower() in ("1", "true", "yes", "si", "on")


def _lista(valor: Optional[str]) -> Optional[list]:
    if not valor:
        return None
    items = [v.strip() for v in valor.split(",") if v.strip()]
    return items or None


def normalizar_url_db(url: str) -> str:
    """Usa el driver psycopg3 para URLs 'postgresql://' si está instalado."""
    try:
        import psycopg  # noqa: F401
    except Exception:
        return url
    if url.startswith("postgresql://") and "+" not in url.split("://", 1)[0]:
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def cargar_configuracion(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Resuelve la configuración a partir de las variables de entorno.

    APP_ENV selecciona el perfil ('produccion' o 'prueba1'); cada perfil trae
    su puerto y su variable de base de datos. Las variables explícitas
    (PORT, SQLALCHEMY_DATABASE_URI) siempre tienen prioridad.
    """
    env = os.environ if environ is None else environ

    app_env = (env.get("APP_ENV") or PERFIL_POR_DEFECTO).strip().lower()
    if app_env not in PERFILES:
        raise ValueError(
            f"APP_ENV desconocido: {app_env!r}. Valores válidos: {', '.join(PERFILES)}"
        )
    perfil = PERFILES[app_env]

    db_url = (
        env.get("SQLALCHEMY_DATABASE_URI")
        or env.get(perfil["DB_ENV"])
        or (env.get("DATABASE_URL") if app_env == PERFIL_POR_DEFECTO else None)
        or f"sqlite:///{(DATA_DIR / perfil['DB_ARCHIVO']).as_posix()}"
    )

    return {
        "APP_ENV": app_env,
        "HOST": env.get("HOST", "127.0.0.1"),
        "PORT": int(env.get("PORT") or perfil["PORT"]),
        "DEBUG": _bool(env.get("DEBUG"), defecto=(app_env != PERFIL_POR_DEFECTO)),
        "LOG_LEVEL": (env.get("LOG_LEVEL") or "INFO").upper(),
        "SQLALCHEMY_DATABASE_URI": normalizar_url_db(db_url),
        "CREAR_TABLAS": _bool(env.get("CREAR_TABLAS"), defecto=True),
        "SECRET_KEY": env.get("SECRET_KEY", "clave-secreta-para-prototipo"),
        "CORS_ORIGINS": env.get("CORS_ORIGINS", "*"),
        "ESTADOS_PEDIDO": _lista(env.get("ESTADOS_PEDIDO")),
        "TRANSICIONES_PEDIDO": env.get("TRANSICIONES_PEDIDO") or None,
    }


class Config:
    """
    Configuración global de la aplicación Flask.
    Por defecto usa una base SQLite en data/ según el perfil (APP_ENV).
    """

    _valores = cargar_configuracion()

    # -------------------- Entorno / servidor --------------------
    APP_ENV = _valores["APP_ENV"]
    HOST = _valores["HOST"]
    PORT = _valores["PORT"]
    DEBUG = _valores["DEBUG"]
    LOG_LEVEL = _valores["LOG_LEVEL"]

    # -------------------- SQLAlchemy --------------------
    SQLALCHEMY_DATABASE_URI = _valores["SQLALCHEMY_DATABASE_URI"]
    CREAR_TABLAS = _valores["CREAR_TABLAS"]

    # -------------------- Seguridad / CORS --------------------
    SECRET_KEY = _valores["SECRET_KEY"]
    CORS_ORIGINS = _valores["CORS_ORIGINS"]

    # -------------------- Flujo de estados de pedidos --------------------
    # None = enumeración y tabla de transiciones por defecto
    ESTADOS_PEDIDO = _valores["ESTADOS_PEDIDO"]
    TRANSICIONES_PEDIDO = _valores["TRANSICIONES_PEDIDO"]
