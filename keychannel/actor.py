# --------------------------------------------------------------
# File: actor.py
# Description: Participante del intercambio: identidad, mensaje y motor propio.
# --------------------------------------------------------------
"""Actor genérico que cifra hacia otros y descifra lo que recibe."""

from __future__ import annotations

import logging
from typing import Optional

from cryptography.hazmat.primitives.asymmetric import rsa

from keychannel import config
from keychannel.codec import hex_dump
from keychannel.engine import CipherEngine, RsaCipherEngine
from keychannel.errors import CryptoError
from keychannel.models import KeyEncoding
from keychannel.storage import KeyDestination, KeySource

logger = logging.getLogger(__name__)


class Actor:
    """Identidad con un mensaje y un motor de cifrado en exclusiva.

    Las trazas de diagnóstico incluyen el texto en claro: son una ayuda de
    depuración y demostración, nunca parte de la frontera de seguridad.

    Attributes:
        name (str): Identidad del participante.
        message (str): Texto que se enviará en el próximo `encrypt`.
        last_trace (str): Última traza de diagnóstico generada.

    """

    def __init__(self, name: str, message: str = "", engine: Optional[CipherEngine] = None) -> None:
        self.name = name
        self.message = message
        self._engine = engine if engine is not None else RsaCipherEngine()
        self.last_trace = ""

    def __repr__(self) -> str:
        try:
            info = self._engine.info
            keys = f"{info.algorithm}-{info.key_size}"
        except CryptoError:
            keys = "sin claves"
        return f"Actor(name={self.name!r}, keys={keys})"

    def _trace(self, *entries: str) -> str:
        trace = "\n".join(f"[{self.name}] {entry}" for entry in entries)
        self.last_trace = trace
        logger.debug("%s", trace)
        return trace

    def set_message(self, text: str) -> None:
        self.message = text

    def public_key(self) -> rsa.RSAPublicKey:
        return self._engine.public_key()

    def encrypt(self, recipient_public_key: rsa.RSAPublicKey) -> bytes:
        """Cifra el mensaje propio con la clave pública de otro actor.

        Args:
            recipient_public_key (rsa.RSAPublicKey): Clave pública del destinatario.

        Returns:
            bytes: Texto cifrado listo para entregarse al destinatario.

        """

        ciphertext = self._engine.encrypt_for(self.message, recipient_public_key)
        self._trace(
            f"plaintext={self.message}",
            f"plaintext_hex={hex_dump(self.message.encode('utf-8'))}",
            f"ciphertext={hex_dump(ciphertext)}",
        )
        return ciphertext

    def decrypt_bytes(self, ciphertext: bytes) -> bytes:
        plaintext = self._engine.decrypt(ciphertext)
        self._trace(f"decrypted_hex={hex_dump(plaintext)}")
        return plaintext

    def decrypt(self, ciphertext: bytes) -> str:
        """Descifra con la clave privada propia y devuelve el texto UTF-8.

        Raises:
            CryptoError: El descifrado falla o el resultado no es UTF-8.

        """

        plaintext = self._engine.decrypt(ciphertext)
        try:
            text = plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CryptoError("El mensaje descifrado no es texto UTF-8") from exc
        self._trace(f"decrypted_hex={hex_dump(plaintext)}", f"decrypted={text}")
        return text

    def load_key_pair(
        self,
        private_source: Optional[KeySource] = None,
        public_source: Optional[KeySource] = None,
        encoding: Optional[KeyEncoding] = None,
    ) -> None:
        """Carga el par desde las fuentes dadas o desde las rutas por defecto del actor."""

        if private_source is None or public_source is None:
            default_private, default_public = config.default_key_paths(self.name)
            private_source = private_source if private_source is not None else default_private
            public_source = public_source if public_source is not None else default_public
        self._engine.load_key_pair(private_source, public_source, encoding)

    def save_key_pair(
        self,
        private_destination: KeyDestination = None,
        public_destination: KeyDestination = None,
        encoding: Optional[KeyEncoding] = None,
    ) -> None:
        """Guarda el par; cada destino omitido toma la ruta por defecto del actor."""

        if private_destination is None or public_destination is None:
            default_private, default_public = config.default_key_paths(self.name)
            if private_destination is None:
                private_destination = default_private
            if public_destination is None:
                public_destination = default_public
        self._engine.save_key_pair(private_destination, public_destination, encoding)
