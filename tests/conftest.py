# --------------------------------------------------------------
# File: conftest.py
# Description: Fixtures compartidas para aislar el directorio de claves y reutilizar pares RSA.
# --------------------------------------------------------------

from typing import Iterator

import pytest

from keychannel import config
from keychannel.engine import RsaCipherEngine
from keychannel.models import Padding


@pytest.fixture(autouse=True)
def _isolate_keys_dir(tmp_path, monkeypatch) -> Iterator[None]:
    """Redirige KEYS_DIR a una carpeta temporal para cada prueba.

    Args:
        tmp_path (Path): Carpeta temporal proporcionada por pytest.
        monkeypatch (pytest.MonkeyPatch): Fixture para ajustar la configuración.

    Returns:
        Iterator[None]: Control del fixture autouse durante la ejecución de cada test.
    """
    keys_dir = tmp_path / "_keys"
    monkeypatch.setattr(config, "KEYS_DIR", str(keys_dir))
    monkeypatch.setattr(config, "STRICT_ARMOR", True)

    yield
    # tmp_path se limpia automáticamente por pytest


@pytest.fixture(scope="session")
def alice_engine() -> RsaCipherEngine:
    """Motor RSA-2048 OAEP-SHA256 reutilizado entre pruebas.

    Returns:
        RsaCipherEngine: Motor con un par recién generado.
    """
    return RsaCipherEngine(key_size=2048, padding=Padding.OAEP)


@pytest.fixture(scope="session")
def bob_engine() -> RsaCipherEngine:
    """Segundo motor independiente para comprobar el aislamiento de claves.

    Returns:
        RsaCipherEngine: Motor con un par distinto al de `alice_engine`.
    """
    return RsaCipherEngine(key_size=2048, padding=Padding.OAEP)


@pytest.fixture(scope="session")
def alice_pkcs1_engine() -> RsaCipherEngine:
    """Motor RSA-2048 con relleno PKCS#1 v1.5 explícito.

    Returns:
        RsaCipherEngine: Motor de compatibilidad con el relleno clásico.
    """
    return RsaCipherEngine(key_size=2048, padding=Padding.PKCS1V15)


@pytest.fixture(scope="session")
def bob_pkcs1_engine() -> RsaCipherEngine:
    """Emisor PKCS#1 v1.5 para las pruebas del relleno clásico.

    Returns:
        RsaCipherEngine: Motor con un par distinto al de `alice_pkcs1_engine`.
    """
    return RsaCipherEngine(key_size=2048, padding=Padding.PKCS1V15)
