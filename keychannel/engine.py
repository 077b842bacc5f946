# --------------------------------------------------------------
# File: engine.py
# Description: Custodia del par de claves RSA y primitivas de cifrado asimétrico.
# --------------------------------------------------------------
"""Motor de cifrado asimétrico: generación, carga, guardado y cifrado RSA.

El motor guarda un único par de claves. La clave privada no sale nunca del
motor; solo la pública se ofrece a otros actores para que cifren hacia él.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding
from cryptography.hazmat.primitives.asymmetric import rsa

from keychannel import config
from keychannel.errors import CryptoError
from keychannel.models import KeyEncoding, KeyPairInfo, Padding, max_plaintext
from keychannel.storage import KeyDestination, KeySource, KeyStore, save_public_key

__all__ = ["CipherEngine", "RsaCipherEngine", "MIN_KEY_SIZE", "PUBLIC_EXPONENT"]

logger = logging.getLogger(__name__)

PUBLIC_EXPONENT = 65537
MIN_KEY_SIZE = 1024
_BYTES_LIKE = (bytes, bytearray, memoryview)


class CipherEngine(Protocol):
    """Capacidades que un actor necesita de su motor de cifrado."""

    @property
    def info(self) -> KeyPairInfo:
        ...

    def generate(self, key_size: int = 2048) -> rsa.RSAPublicKey:
        ...

    def public_key(self) -> rsa.RSAPublicKey:
        ...

    def encrypt_for(
        self, plaintext: Union[bytes, str], recipient_public_key: rsa.RSAPublicKey
    ) -> bytes:
        ...

    def decrypt(self, ciphertext: bytes) -> bytes:
        ...

    def load_key_pair(
        self,
        private_source: KeySource,
        public_source: KeySource,
        encoding: Optional[KeyEncoding] = None,
    ) -> None:
        ...

    def save_key_pair(
        self,
        private_destination: KeyDestination,
        public_destination: KeyDestination,
        encoding: Optional[KeyEncoding] = None,
    ) -> None:
        ...


@dataclass(frozen=True)
class _KeyPair:
    """Par de claves inmutable; solo se sustituye completo."""

    public: rsa.RSAPublicKey
    private: rsa.RSAPrivateKey
    info: KeyPairInfo

    def __repr__(self) -> str:
        return f"_KeyPair({self.info.algorithm}-{self.info.key_size})"


def _padding_for(scheme: Padding) -> asym_padding.AsymmetricPadding:
    if scheme is Padding.OAEP:
        return asym_padding.OAEP(
            mgf=asym_padding.MGF1(algorithm=hashes.SHA256()),
            algorithm=hashes.SHA256(),
            label=None,
        )
    return asym_padding.PKCS1v15()


class RsaCipherEngine:
    """Motor RSA con relleno OAEP-SHA256 (por defecto) o PKCS#1 v1.5.

    Con OAEP descifrar con una clave ajena siempre falla con `CryptoError`.
    PKCS#1 v1.5 se mantiene por compatibilidad; con el rechazo implícito de
    OpenSSL una clave ajena puede devolver bytes aleatorios en lugar de fallar.

    Args:
        key_size (Optional[int]): Bits del módulo para la generación inicial.
        padding (Optional[Padding]): Esquema de relleno fijo del motor.
        store (Optional[KeyStore]): Almacén usado para cargar y guardar.
        generate (bool): Si es falso el motor nace sin par de claves.

    """

    def __init__(
        self,
        key_size: Optional[int] = None,
        padding: Optional[Union[Padding, str]] = None,
        store: Optional[KeyStore] = None,
        generate: bool = True,
    ) -> None:
        try:
            self.padding = Padding(padding if padding is not None else config.PADDING)
        except ValueError as exc:
            raise CryptoError(f"Relleno no soportado: {padding or config.PADDING}") from exc
        self.store = store if store is not None else KeyStore()
        self._pair: Optional[_KeyPair] = None
        if generate:
            self.generate(key_size if key_size is not None else config.KEY_SIZE)

    def __repr__(self) -> str:
        held = f"{self._pair.info.key_size} bits" if self._pair else "sin claves"
        return f"RsaCipherEngine(padding={self.padding.value}, {held})"

    @property
    def has_key_pair(self) -> bool:
        return self._pair is not None

    @property
    def info(self) -> KeyPairInfo:
        return self._require_pair().info

    def _require_pair(self) -> _KeyPair:
        if self._pair is None:
            raise CryptoError("El motor no tiene un par de claves")
        return self._pair

    def generate(self, key_size: int = 2048) -> rsa.RSAPublicKey:
        """Genera un par nuevo con aleatoriedad segura y sustituye el actual.

        Args:
            key_size (int): Bits del módulo RSA; mínimo 1024.

        Returns:
            rsa.RSAPublicKey: Clave pública del par recién creado.

        """

        if key_size < MIN_KEY_SIZE:
            raise CryptoError(f"Tamaño de clave insuficiente: {key_size} < {MIN_KEY_SIZE}")
        try:
            private = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=key_size)
        except (ValueError, UnsupportedAlgorithm) as exc:
            raise CryptoError(f"No se pudo generar la clave RSA-{key_size}") from exc
        self._pair = _KeyPair(
            public=private.public_key(),
            private=private,
            info=KeyPairInfo(algorithm="RSA", key_size=private.key_size),
        )
        logger.debug("Par RSA-%d generado", key_size)
        return self._pair.public

    def load_key_pair(
        self,
        private_source: KeySource,
        public_source: KeySource,
        encoding: Optional[KeyEncoding] = None,
    ) -> None:
        """Carga ambas claves y sustituye el par solo si las dos son coherentes."""

        private = self.store.load_private_key(private_source, encoding)
        public = self.store.load_public_key(public_source, encoding)
        if public.public_numbers() != private.public_key().public_numbers():
            raise CryptoError("La clave pública no corresponde a la clave privada")
        self._pair = _KeyPair(
            public=public,
            private=private,
            info=KeyPairInfo(algorithm="RSA", key_size=private.key_size),
        )
        logger.debug("Par RSA-%d cargado", private.key_size)

    def save_key_pair(
        self,
        private_destination: KeyDestination,
        public_destination: KeyDestination,
        encoding: Optional[KeyEncoding] = None,
    ) -> None:
        """Guarda el par; si falla la escritura no queda en disco un par mezclado."""

        pair = self._require_pair()
        self.store.save_key_pair(
            pair.private, pair.public, private_destination, public_destination, encoding
        )

    def public_key(self) -> rsa.RSAPublicKey:
        return self._require_pair().public

    def public_key_bytes(self, encoding: KeyEncoding = KeyEncoding.ARMORED) -> bytes:
        """Descriptor de la clave pública actual, listo para publicarse."""

        return save_public_key(self.public_key(), None, encoding)

    def max_plaintext(self, key_size: Optional[int] = None) -> int:
        return max_plaintext(key_size or self.info.key_size, self.padding)

    def encrypt_for(
        self, plaintext: Union[bytes, str], recipient_public_key: rsa.RSAPublicKey
    ) -> bytes:
        """Cifra con la clave pública del destinatario.

        Args:
            plaintext (Union[bytes, str]): Mensaje; las cadenas se codifican en UTF-8.
            recipient_public_key (rsa.RSAPublicKey): Clave pública del destinatario.

        Returns:
            bytes: Texto cifrado de `key_size // 8` bytes, sin metadatos.

        Raises:
            CryptoError: Clave incompatible, mensaje de tipo no admitido o mayor
                que el límite.

        """

        if not isinstance(recipient_public_key, rsa.RSAPublicKey):
            raise CryptoError("La clave del destinatario no es una clave pública RSA")
        if isinstance(plaintext, str):
            data = plaintext.encode("utf-8")
        elif isinstance(plaintext, _BYTES_LIKE):
            data = bytes(plaintext)
        else:
            raise CryptoError(f"El mensaje debe ser bytes o str, no {type(plaintext).__name__}")
        limit = max_plaintext(recipient_public_key.key_size, self.padding)
        if len(data) > limit:
            raise CryptoError(
                f"Mensaje de {len(data)} bytes supera el máximo de {limit} "
                f"para RSA-{recipient_public_key.key_size}/{self.padding.value}"
            )
        try:
            return recipient_public_key.encrypt(data, _padding_for(self.padding))
        except ValueError as exc:
            raise CryptoError("Fallo al cifrar") from exc

    def decrypt(self, ciphertext: bytes) -> bytes:
        """Descifra con la clave privada propia.

        Raises:
            CryptoError: Sin clave privada, longitud incorrecta o relleno inválido
                (incluido el uso de una clave que no corresponde).

        """

        pair = self._require_pair()
        if not isinstance(ciphertext, _BYTES_LIKE):
            raise CryptoError(f"El texto cifrado debe ser bytes, no {type(ciphertext).__name__}")
        data = bytes(ciphertext)
        expected = pair.info.key_size // 8
        if len(data) != expected:
            raise CryptoError(f"Texto cifrado de {len(data)} bytes; se esperaban {expected}")
        try:
            return pair.private.decrypt(data, _padding_for(self.padding))
        except ValueError as exc:
            raise CryptoError("Fallo al descifrar: relleno inválido o clave incorrecta") from exc
