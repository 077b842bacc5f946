# --------------------------------------------------------------
# File: models.py
# Description: Modelos de datos comunes utilizados por la capa criptográfica.
# --------------------------------------------------------------
"""Modelos Pydantic que describen claves, pares y límites de cifrado."""

from enum import Enum

from pydantic import BaseModel, ConfigDict

# Longitud del resumen SHA-256 usado por OAEP (hash y MGF1).
_OAEP_HASH_LEN = 32


class KeyRole(str, Enum):
    """Papel de una clave dentro del par."""

    PUBLIC = "public"
    PRIVATE = "private"

    @property
    def label(self) -> str:
        """Etiqueta usada en las líneas BEGIN/END del formato blindado."""

        return "PUBLIC KEY" if self is KeyRole.PUBLIC else "PRIVATE KEY"


class KeyEncoding(str, Enum):
    """Representación de un descriptor de clave en almacenamiento."""

    BINARY = "binary"
    ARMORED = "armored"


class Padding(str, Enum):
    """Esquemas de relleno admitidos por el motor RSA."""

    PKCS1V15 = "pkcs1v15"
    OAEP = "oaep"


class KeyMaterial(BaseModel):
    """Bytes de una clave etiquetados con su papel y su codificación.

    Attributes:
        data (bytes): Descriptor DER o texto blindado en bytes ASCII.
        role (KeyRole): Clave pública o privada.
        encoding (KeyEncoding): Forma binaria o blindada de `data`.

    """

    model_config = ConfigDict(frozen=True)

    data: bytes
    role: KeyRole
    encoding: KeyEncoding


class KeyPairInfo(BaseModel):
    """Metadatos inmutables de un par de claves.

    Attributes:
        algorithm (str): Familia asimétrica, siempre `RSA`.
        key_size (int): Tamaño del módulo en bits.

    """

    model_config = ConfigDict(frozen=True)

    algorithm: str = "RSA"
    key_size: int


def max_plaintext(key_size: int, padding: Padding) -> int:
    """Calcula el máximo de bytes en claro aceptado por un único cifrado.

    Args:
        key_size (int): Tamaño del módulo RSA en bits.
        padding (Padding): Esquema de relleno aplicado.

    Returns:
        int: Bytes máximos; 245 para RSA-2048 con PKCS#1 v1.5.

    """

    modulus_len = key_size // 8
    if Padding(padding) is Padding.OAEP:
        return modulus_len - 2 * _OAEP_HASH_LEN - 2
    return modulus_len - 11
