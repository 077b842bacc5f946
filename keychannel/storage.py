# --------------------------------------------------------------
# File: storage.py
# Description: Carga y persistencia de claves RSA en forma binaria o blindada.
# --------------------------------------------------------------
"""Funciones de entrada/salida para el material de claves del canal."""

from __future__ import annotations

import logging
import os
from typing import List, Optional, Tuple, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from keychannel.codec import codec_for
from keychannel.errors import CryptoError, FormatError, KeyIOError
from keychannel.models import KeyEncoding, KeyMaterial, KeyRole

__all__ = [
    "KeyStore",
    "export_private_key",
    "export_public_key",
    "load_private_key",
    "load_public_key",
    "save_key_pair",
    "save_private_key",
    "save_public_key",
]

logger = logging.getLogger(__name__)

KeySource = Union[bytes, bytearray, str, "os.PathLike[str]", KeyMaterial]
KeyDestination = Optional[Union[str, "os.PathLike[str]"]]


def _ensure_parent_dir(path: str) -> None:
    """Garantiza que exista el directorio padre del archivo de destino."""

    parent = os.path.dirname(path) or "."
    os.makedirs(parent, exist_ok=True)


def _read_source(source: KeySource) -> bytes:
    """Obtiene los bytes de un búfer, de un texto blindado o de un fichero."""

    if isinstance(source, KeyMaterial):
        return source.data
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str) and "-----BEGIN" in source:
        return source.encode("ascii", errors="replace")
    path = os.fspath(source)
    try:
        with open(path, "rb") as handler:
            return handler.read()
    except OSError as exc:
        raise KeyIOError(exc.errno, f"No se puede leer la clave: {exc.strerror}", path) from exc


def _source_encoding(source: KeySource, encoding: KeyEncoding, role: KeyRole) -> KeyEncoding:
    """Un `KeyMaterial` impone su propia codificación y debe tener el papel esperado."""

    if not isinstance(source, KeyMaterial):
        return KeyEncoding(encoding)
    if source.role != role:
        raise FormatError(f"Se esperaba material {role.value} y se recibió {source.role.value}")
    return KeyEncoding(source.encoding)


def _atomic_write_many(entries: List[Tuple[str, bytes, bool]]) -> None:
    """Escribe todos los temporales antes de renombrar ninguno.

    Si falla la escritura de cualquier temporal se borran todos y los ficheros
    de destino previos quedan intactos.
    """

    staged: List[Tuple[str, str]] = []
    try:
        for path, payload, private in entries:
            tmp_path = f"{path}.tmp"
            _ensure_parent_dir(path)
            mode = 0o600 if private else 0o644
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, mode)
            staged.append((tmp_path, path))
            with os.fdopen(fd, "wb") as handler:
                handler.write(payload)
        for tmp_path, path in staged:
            os.replace(tmp_path, path)
    except OSError as exc:
        for tmp_path, _ in staged:
            if os.path.isfile(tmp_path):
                os.remove(tmp_path)
        raise KeyIOError(
            exc.errno, f"No se puede escribir la clave: {exc.strerror}", exc.filename
        ) from exc


def _atomic_write(path: str, payload: bytes, private: bool) -> None:
    """Escribe en un temporal y lo renombra; un fallo no toca el fichero previo."""

    _atomic_write_many([(path, payload, private)])


def export_public_key(key: rsa.RSAPublicKey) -> bytes:
    """Exporta la clave pública a su descriptor DER SubjectPublicKeyInfo."""

    return key.public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )


def export_private_key(key: rsa.RSAPrivateKey) -> bytes:
    """Exporta la clave privada a su descriptor DER PKCS#8 sin cifrar."""

    return key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


def load_public_key(
    source: KeySource,
    encoding: KeyEncoding = KeyEncoding.BINARY,
    strict: Optional[bool] = None,
) -> rsa.RSAPublicKey:
    """Carga una clave pública RSA desde un búfer o un fichero.

    Args:
        source (KeySource): Bytes, texto blindado, ruta o `KeyMaterial`.
        encoding (KeyEncoding): Representación de `source`. Un `KeyMaterial` usa la suya.
        strict (Optional[bool]): Comprobación de etiquetas del formato blindado.

    Returns:
        rsa.RSAPublicKey: Manejador de la clave pública.

    Raises:
        FormatError: El descriptor no es una clave pública válida o el
            `KeyMaterial` no es público.
        CryptoError: La clave no pertenece a la familia RSA.
        KeyIOError: El fichero no se puede leer.

    """

    encoding = _source_encoding(source, encoding, KeyRole.PUBLIC)
    raw = _read_source(source)
    der = codec_for(encoding, strict=strict).decode(raw, role=KeyRole.PUBLIC)
    try:
        key = serialization.load_der_public_key(der)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise FormatError("El descriptor no es una clave pública válida") from exc
    if not isinstance(key, rsa.RSAPublicKey):
        raise CryptoError(f"Se esperaba una clave pública RSA, no {type(key).__name__}")
    logger.debug("Clave pública cargada (%s, %d bits)", encoding.value, key.key_size)
    return key


def load_private_key(
    source: KeySource,
    encoding: KeyEncoding = KeyEncoding.BINARY,
    strict: Optional[bool] = None,
) -> rsa.RSAPrivateKey:
    """Carga una clave privada RSA PKCS#8 sin cifrar desde un búfer o un fichero.

    Args:
        source (KeySource): Bytes, texto blindado, ruta o `KeyMaterial`.
        encoding (KeyEncoding): Representación de `source`.
        strict (Optional[bool]): Comprobación de etiquetas del formato blindado.

    Returns:
        rsa.RSAPrivateKey: Manejador de la clave privada.

    """

    encoding = _source_encoding(source, encoding, KeyRole.PRIVATE)
    raw = _read_source(source)
    der = codec_for(encoding, strict=strict).decode(raw, role=KeyRole.PRIVATE)
    try:
        key = serialization.load_der_private_key(der, password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise FormatError("El descriptor no es una clave privada válida") from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise CryptoError(f"Se esperaba una clave privada RSA, no {type(key).__name__}")
    logger.debug("Clave privada cargada (%s, %d bits)", encoding.value, key.key_size)
    return key


def save_public_key(
    key: rsa.RSAPublicKey,
    destination: KeyDestination = None,
    encoding: KeyEncoding = KeyEncoding.BINARY,
) -> bytes:
    """Exporta la clave pública y la escribe si se indica destino.

    Returns:
        bytes: Contenido exacto escrito (o que se escribiría).

    """

    payload = codec_for(encoding).encode(export_public_key(key), KeyRole.PUBLIC)
    if destination is not None:
        _atomic_write(os.fspath(destination), payload, private=False)
        logger.debug("Clave pública guardada en %s (%s)", destination, KeyEncoding(encoding).value)
    return payload


def save_private_key(
    key: rsa.RSAPrivateKey,
    destination: KeyDestination = None,
    encoding: KeyEncoding = KeyEncoding.BINARY,
) -> bytes:
    """Exporta la clave privada y la escribe con permisos 0600 si se indica destino."""

    payload = codec_for(encoding).encode(export_private_key(key), KeyRole.PRIVATE)
    if destination is not None:
        _atomic_write(os.fspath(destination), payload, private=True)
        logger.debug("Clave privada guardada en %s (%s)", destination, KeyEncoding(encoding).value)
    return payload


def save_key_pair(
    private_key: rsa.RSAPrivateKey,
    public_key: rsa.RSAPublicKey,
    private_destination: KeyDestination = None,
    public_destination: KeyDestination = None,
    encoding: KeyEncoding = KeyEncoding.BINARY,
) -> Tuple[bytes, bytes]:
    """Escribe ambas mitades del par como una sola operación.

    Los dos temporales se escriben antes de renombrar ninguno, de modo que un
    fallo de escritura deja en disco el par anterior completo. Un destino
    `None` se omite.

    Args:
        private_key (rsa.RSAPrivateKey): Clave privada del par.
        public_key (rsa.RSAPublicKey): Clave pública del par.
        private_destination (KeyDestination): Fichero de la clave privada.
        public_destination (KeyDestination): Fichero de la clave pública.
        encoding (KeyEncoding): Representación de ambos ficheros.

    Returns:
        Tuple[bytes, bytes]: Contenidos privado y público.

    Raises:
        KeyIOError: No se pudo escribir alguno de los ficheros.

    """

    private_payload = codec_for(encoding).encode(export_private_key(private_key), KeyRole.PRIVATE)
    public_payload = codec_for(encoding).encode(export_public_key(public_key), KeyRole.PUBLIC)
    entries: List[Tuple[str, bytes, bool]] = []
    if private_destination is not None:
        entries.append((os.fspath(private_destination), private_payload, True))
    if public_destination is not None:
        entries.append((os.fspath(public_destination), public_payload, False))
    if entries:
        _atomic_write_many(entries)
        logger.debug(
            "Par de claves guardado en %s (%s)",
            ", ".join(path for path, _, _ in entries),
            KeyEncoding(encoding).value,
        )
    return private_payload, public_payload


class KeyStore:
    """Almacén de claves con una representación por defecto."""

    def __init__(
        self,
        encoding: KeyEncoding = KeyEncoding.BINARY,
        strict: Optional[bool] = None,
    ) -> None:
        self.encoding = KeyEncoding(encoding)
        self.strict = strict

    def _resolve(self, encoding: Optional[KeyEncoding]) -> KeyEncoding:
        return self.encoding if encoding is None else KeyEncoding(encoding)

    def load_public_key(
        self, source: KeySource, encoding: Optional[KeyEncoding] = None
    ) -> rsa.RSAPublicKey:
        return load_public_key(source, self._resolve(encoding), strict=self.strict)

    def load_private_key(
        self, source: KeySource, encoding: Optional[KeyEncoding] = None
    ) -> rsa.RSAPrivateKey:
        return load_private_key(source, self._resolve(encoding), strict=self.strict)

    def save_public_key(
        self,
        key: rsa.RSAPublicKey,
        destination: KeyDestination = None,
        encoding: Optional[KeyEncoding] = None,
    ) -> bytes:
        return save_public_key(key, destination, self._resolve(encoding))

    def save_private_key(
        self,
        key: rsa.RSAPrivateKey,
        destination: KeyDestination = None,
        encoding: Optional[KeyEncoding] = None,
    ) -> bytes:
        return save_private_key(key, destination, self._resolve(encoding))

    def save_key_pair(
        self,
        private_key: rsa.RSAPrivateKey,
        public_key: rsa.RSAPublicKey,
        private_destination: KeyDestination = None,
        public_destination: KeyDestination = None,
        encoding: Optional[KeyEncoding] = None,
    ) -> Tuple[bytes, bytes]:
        return save_key_pair(
            private_key,
            public_key,
            private_destination,
            public_destination,
            self._resolve(encoding),
        )
