# --------------------------------------------------------------
# File: errors.py
# Description: Jerarquía de excepciones del canal seguro.
# --------------------------------------------------------------
"""Excepciones explícitas para las operaciones que pueden fallar."""


class KeyChannelError(Exception):
    """Error base del paquete."""


class FormatError(KeyChannelError, ValueError):
    """Texto blindado o descriptor de clave mal formado."""


class CryptoError(KeyChannelError):
    """Fallo de generación, tamaño, relleno o clave incompatible."""


class KeyIOError(KeyChannelError, OSError):
    """El almacenamiento de claves no se puede leer o escribir."""
