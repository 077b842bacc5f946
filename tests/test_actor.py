# --------------------------------------------------------------
# File: test_actor.py
# Description: Pruebas de integración del intercambio entre actores.
# --------------------------------------------------------------

import logging

import pytest

from keychannel import config
from keychannel.actor import Actor
from keychannel.errors import CryptoError
from keychannel.models import KeyEncoding
from keychannel.storage import export_public_key


@pytest.fixture()
def alice(alice_engine):
    """Actor Alice con el motor compartido de la sesión."""
    return Actor("Alice", "Alice's secret words", engine=alice_engine)


@pytest.fixture()
def bob(bob_engine):
    """Actor Bob con el motor compartido de la sesión."""
    return Actor("Bob", "Bob's secret words", engine=bob_engine)


def test_bob_to_alice(alice, bob):
    """Bob cifra para Alice y solo Alice recupera el texto.

    Returns:
        None: Las aserciones comprueban tamaño y contenido.
    """
    ciphertext = bob.encrypt(alice.public_key())
    assert isinstance(ciphertext, bytes)
    assert len(ciphertext) == 256
    assert alice.decrypt(ciphertext) == "Bob's secret words"


def test_alice_to_bob(alice, bob):
    """El sentido inverso funciona con las claves de Bob.

    Returns:
        None: Bob recupera el mensaje de Alice.
    """
    assert bob.decrypt(alice.encrypt(bob.public_key())) == "Alice's secret words"


def test_eavesdropper_cannot_decrypt(alice, bob):
    """Carol, con su propio par, no puede leer lo cifrado para Alice.

    Returns:
        None: Se espera CryptoError, nunca un texto plausible.
    """
    carol = Actor("Carol", "Carol's secret words")
    ciphertext = bob.encrypt(alice.public_key())
    with pytest.raises(CryptoError):
        carol.decrypt(ciphertext)


def test_sender_cannot_decrypt_own_ciphertext(alice, bob):
    """El emisor no conserva capacidad de descifrar lo que envió.

    Returns:
        None: Se espera CryptoError.
    """
    ciphertext = bob.encrypt(alice.public_key())
    with pytest.raises(CryptoError):
        bob.decrypt(ciphertext)


def test_set_message_changes_next_encryption(alice, bob):
    """`set_message` sustituye el texto del siguiente cifrado.

    Returns:
        None: Alice descifra el mensaje nuevo.
    """
    bob.set_message("otro mensaje")
    assert alice.decrypt(bob.encrypt(alice.public_key())) == "otro mensaje"


def test_oversized_message_fails(alice, bob):
    """Un mensaje por encima de 190 bytes falla sin truncarse.

    Returns:
        None: Se espera CryptoError.
    """
    bob.set_message("a" * 191)
    with pytest.raises(CryptoError):
        bob.encrypt(alice.public_key())


def test_trace_records_plaintext_and_ciphertext(alice, bob, caplog):
    """Las trazas de diagnóstico incluyen claro y volcado hexadecimal.

    Returns:
        None: Las aserciones inspeccionan `last_trace` y el log DEBUG.
    """
    with caplog.at_level(logging.DEBUG, logger="keychannel.actor"):
        ciphertext = bob.encrypt(alice.public_key())
        alice.decrypt(ciphertext)
    assert "[Bob] plaintext=Bob's secret words" in bob.last_trace
    assert f"[Bob] ciphertext={ciphertext.hex().upper()}" in bob.last_trace
    assert "[Alice] decrypted=Bob's secret words" in alice.last_trace
    assert any("[Bob] plaintext=" in record.getMessage() for record in caplog.records)


def test_decrypt_bytes_returns_raw(alice, bob):
    """`decrypt_bytes` devuelve los bytes sin decodificar.

    Returns:
        None: Se comparan con el UTF-8 del mensaje.
    """
    assert alice.decrypt_bytes(bob.encrypt(alice.public_key())) == b"Bob's secret words"


def test_repr_hides_key_material(alice):
    """La representación muestra nombre y tamaño, nunca material de clave.

    Returns:
        None: Se inspecciona la cadena generada.
    """
    text = repr(alice)
    assert "Alice" in text and "RSA-2048" in text
    assert "BEGIN" not in text


def test_save_and_load_default_paths(alice):
    """Sin rutas explícitas se usan las rutas por defecto del actor.

    Returns:
        None: Un actor nuevo carga el par de Alice desde KEYS_DIR.
    """
    alice.save_key_pair(encoding=KeyEncoding.ARMORED)
    private_path, public_path = config.default_key_paths("Alice")
    with open(public_path, "rb") as handler:
        assert handler.read().startswith(b"-----BEGIN PUBLIC KEY-----")

    twin = Actor("Alice", "")
    twin.load_key_pair(encoding=KeyEncoding.ARMORED)
    assert export_public_key(twin.public_key()) == export_public_key(alice.public_key())
    assert private_path.endswith("alice.key")


def test_eavesdropper_never_reads_any_message(alice, bob):
    """Con el relleno por defecto Carol falla con cada mensaje, no solo con uno.

    Returns:
        None: Cada descifrado de Carol termina en CryptoError.
    """
    carol = Actor("Carol", "")
    for index in range(50):
        bob.set_message(f"secreto {index}")
        ciphertext = bob.encrypt(alice.public_key())
        with pytest.raises(CryptoError):
            carol.decrypt(ciphertext)


def test_save_with_one_destination_fills_the_other(alice, tmp_path):
    """Con solo la ruta privada, la pública va a su ruta por defecto.

    Returns:
        None: Ambas mitades quedan escritas y forman el par de Alice.
    """
    private_path = tmp_path / "solo.key"
    alice.save_key_pair(private_destination=private_path)
    _, default_public = config.default_key_paths("Alice")

    twin = Actor("Alice", "")
    twin.load_key_pair(private_path, default_public)
    assert export_public_key(twin.public_key()) == export_public_key(alice.public_key())


def test_save_with_public_destination_only(alice, tmp_path):
    """Con solo la ruta pública, la privada va a su ruta por defecto.

    Returns:
        None: Existe la clave privada en KEYS_DIR.
    """
    alice.save_key_pair(public_destination=tmp_path / "solo.pub")
    default_private, _ = config.default_key_paths("Alice")
    with open(default_private, "rb") as handler:
        assert handler.read()
    assert (tmp_path / "solo.pub").is_file()
