# --------------------------------------------------------------
# File: __init__.py
# Description: Exposición pública del canal seguro de clave pública.
# --------------------------------------------------------------
"""Inicializa el paquete `keychannel` y documenta sus módulos principales."""

from keychannel.actor import Actor
from keychannel.engine import CipherEngine, RsaCipherEngine
from keychannel.errors import CryptoError, FormatError, KeyChannelError, KeyIOError
from keychannel.log import configure_logging
from keychannel.models import KeyEncoding, KeyPairInfo, KeyRole, Padding, max_plaintext

__all__ = [
    "Actor",
    "CipherEngine",
    "CryptoError",
    "FormatError",
    "KeyChannelError",
    "KeyEncoding",
    "KeyIOError",
    "KeyPairInfo",
    "KeyRole",
    "Padding",
    "RsaCipherEngine",
    "configure_logging",
    "max_plaintext",
]
