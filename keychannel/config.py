# --------------------------------------------------------------
# File: config.py
# Description: Parámetros de ejecución leídos del entorno y de `.env`.
# --------------------------------------------------------------
"""Configuración del canal seguro cargada una sola vez al importar."""

import os
from typing import Tuple

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    """Lee una variable entera del entorno con mensaje claro si no lo es."""

    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} debe ser un entero") from exc


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


KEY_SIZE = _env_int("KEYCHANNEL_KEY_SIZE", 2048)
PADDING = os.getenv("KEYCHANNEL_PADDING", "oaep").strip().lower()
STRICT_ARMOR = _env_flag("KEYCHANNEL_STRICT_ARMOR", True)
KEYS_DIR = os.getenv("KEYCHANNEL_KEYS_DIR", "./_keys")
LOG_LEVEL = os.getenv("KEYCHANNEL_LOG_LEVEL", "INFO").upper()


def default_key_paths(name: str) -> Tuple[str, str]:
    """Devuelve las rutas por defecto del par de claves de un actor.

    Args:
        name (str): Identidad del actor, usada como nombre de fichero.

    Returns:
        Tuple[str, str]: Ruta de la clave privada (`.key`) y de la pública (`.pub`).

    """

    os.makedirs(KEYS_DIR, exist_ok=True)
    stem = name.strip().lower().replace(" ", "_")
    return os.path.join(KEYS_DIR, f"{stem}.key"), os.path.join(KEYS_DIR, f"{stem}.pub")
