# --------------------------------------------------------------
# File: codec.py
# Description: Transcodificación entre descriptores DER y su forma blindada.
# --------------------------------------------------------------
"""Codificador de claves: binario canónico y texto blindado base64.

El formato blindado envuelve el descriptor binario en base64 estándar a 64
caracteres por línea, entre una cabecera `-----BEGIN <ETIQUETA>-----` y un
pie `-----END <ETIQUETA>-----`, donde la etiqueta es `PUBLIC KEY` o
`PRIVATE KEY` según el papel de la clave.
"""

from __future__ import annotations

import base64
import binascii
from typing import Optional, Protocol, Union

from keychannel import config
from keychannel.errors import FormatError
from keychannel.models import KeyEncoding, KeyRole

__all__ = [
    "ArmoredKeyCodec",
    "BinaryKeyCodec",
    "KeyCodec",
    "codec_for",
    "decode_armored",
    "decode_binary",
    "encode_armored",
    "encode_binary",
    "hex_dump",
]

LINE_WIDTH = 64
_BEGIN = "-----BEGIN"
_END = "-----END"
_TAIL = "KEY-----"


class KeyCodec(Protocol):
    """Capacidad mínima de un codificador de descriptores de clave."""

    encoding: KeyEncoding

    def encode(self, data: bytes, role: KeyRole) -> bytes:
        ...

    def decode(self, data: bytes, role: Optional[KeyRole] = None) -> bytes:
        ...


def encode_armored(data: bytes, role: KeyRole) -> str:
    """Blinda un descriptor binario con cabecera y pie según su papel.

    Args:
        data (bytes): Descriptor DER de la clave.
        role (KeyRole): Papel que selecciona la etiqueta BEGIN/END.

    Returns:
        str: Texto blindado terminado siempre en salto de línea.

    """

    label = KeyRole(role).label
    body = base64.b64encode(bytes(data)).decode("ascii")
    lines = [f"-----BEGIN {label}-----"]
    lines.extend(body[i : i + LINE_WIDTH] for i in range(0, len(body), LINE_WIDTH))
    lines.append(f"-----END {label}-----")
    return "\n".join(lines) + "\n"


def _marker_label(line: str, prefix: str) -> str:
    return line[len(prefix) : -len("-----")].strip()


def decode_armored(
    text: Union[str, bytes],
    role: Optional[KeyRole] = None,
    strict: Optional[bool] = None,
) -> bytes:
    """Recupera el descriptor binario contenido en un texto blindado.

    Se captura todo lo que hay entre la primera línea BEGIN y la primera
    línea END, concatenado sin separadores, y se decodifica en base64.

    Args:
        text (Union[str, bytes]): Texto blindado completo.
        role (Optional[KeyRole]): Papel esperado; solo se comprueba en modo estricto.
        strict (Optional[bool]): Exige etiquetas BEGIN/END coincidentes. Por
            defecto usa `KEYCHANNEL_STRICT_ARMOR`.

    Returns:
        bytes: Descriptor binario original.

    Raises:
        FormatError: Sin marcador BEGIN, cuerpo truncado, base64 inválido o
            etiquetas incoherentes en modo estricto.

    """

    if strict is None:
        strict = config.STRICT_ARMOR
    if isinstance(text, (bytes, bytearray)):
        try:
            text = bytes(text).decode("ascii")
        except UnicodeDecodeError as exc:
            raise FormatError("El texto blindado no es ASCII") from exc

    begin_label: Optional[str] = None
    end_label: Optional[str] = None
    chunks = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if line.startswith(_BEGIN) and line.endswith(_TAIL):
            begin_label = _marker_label(line, _BEGIN)
        elif line.startswith(_END) and line.endswith(_TAIL):
            if begin_label is not None:
                end_label = _marker_label(line, _END)
            break
        elif begin_label is not None:
            chunks.append(line)

    if begin_label is None:
        raise FormatError("No se encontró el marcador BEGIN")
    if end_label is None:
        raise FormatError("Texto blindado truncado: falta el marcador END")
    if strict:
        if begin_label != end_label:
            raise FormatError(
                f"Etiquetas incoherentes: BEGIN {begin_label} / END {end_label}"
            )
        if role is not None and begin_label != KeyRole(role).label:
            raise FormatError(
                f"Se esperaba {KeyRole(role).label} y se encontró {begin_label}"
            )

    try:
        return base64.b64decode("".join(chunks), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FormatError("El cuerpo blindado no es base64 válido") from exc


def encode_binary(data: bytes) -> bytes:
    """La forma binaria es el descriptor canónico: se devuelve tal cual."""

    return bytes(data)


def decode_binary(data: bytes) -> bytes:
    return bytes(data)


class ArmoredKeyCodec:
    """Codificador blindado con comprobación opcional de etiquetas."""

    encoding = KeyEncoding.ARMORED

    def __init__(self, strict: Optional[bool] = None) -> None:
        self.strict = strict

    def encode(self, data: bytes, role: KeyRole) -> bytes:
        return encode_armored(data, role).encode("ascii")

    def decode(self, data: bytes, role: Optional[KeyRole] = None) -> bytes:
        return decode_armored(data, role=role, strict=self.strict)


class BinaryKeyCodec:
    """Codificador identidad para descriptores DER."""

    encoding = KeyEncoding.BINARY

    def encode(self, data: bytes, role: KeyRole) -> bytes:
        return encode_binary(data)

    def decode(self, data: bytes, role: Optional[KeyRole] = None) -> bytes:
        return decode_binary(data)


def codec_for(encoding: KeyEncoding, strict: Optional[bool] = None) -> KeyCodec:
    """Devuelve el codificador asociado a una representación."""

    if KeyEncoding(encoding) is KeyEncoding.ARMORED:
        return ArmoredKeyCodec(strict=strict)
    return BinaryKeyCodec()


def hex_dump(data: bytes) -> str:
    """Volcado hexadecimal en mayúsculas, dos dígitos por byte y sin separadores."""

    return bytes(data).hex().upper()
