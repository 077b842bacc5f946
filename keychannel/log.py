# --------------------------------------------------------------
# File: log.py
# Description: Configuración opcional del logging del paquete.
# --------------------------------------------------------------
"""Instala un único manejador de consola sobre el logger `keychannel`."""

import logging
from typing import Optional, Union

from keychannel import config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_HANDLER_NAME = "keychannel-console"


def configure_logging(level: Optional[Union[int, str]] = None) -> logging.Logger:
    """Configura el logger raíz del paquete de forma idempotente.

    Args:
        level (Optional[Union[int, str]]): Nivel a aplicar; por defecto el de
            `KEYCHANNEL_LOG_LEVEL`.

    Returns:
        logging.Logger: Logger `keychannel` ya configurado.

    """

    root = logging.getLogger("keychannel")
    root.setLevel(level if level is not None else config.LOG_LEVEL)
    if not any(h.get_name() == _HANDLER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    return root
