"""
Blocking HTTP client over a thread-safe pool of reusable transport handles
"""

from __future__ import annotations

# Set default logging handler to avoid "No handler found" warnings.
import logging
import typing
from logging import NullHandler

from . import exceptions
from ._collections import HTTPHeaders
from ._version import __version__
from .client import Connection, ConnectionOptions
from .connection import HTTPClientEngine
from .engine import Handle, Option, TransportEngine, default_engine
from .handlepool import HandlePool, ScopedHandle
from .request import Request, RequestMethod
from .response import Response
from .util.url import Url

__license__ = "MIT"
__version__ = __version__

__all__ = (
    "Connection",
    "ConnectionOptions",
    "HTTPClientEngine",
    "HTTPHeaders",
    "Handle",
    "HandlePool",
    "Option",
    "Request",
    "RequestMethod",
    "Response",
    "ScopedHandle",
    "TransportEngine",
    "Url",
    "add_stderr_logger",
    "default_engine",
    "exceptions",
)

logging.getLogger(__name__).addHandler(NullHandler())


def add_stderr_logger(
    level: int = logging.DEBUG,
) -> logging.StreamHandler[typing.TextIO]:
    """
    Helper for quickly adding a StreamHandler to the logger. Useful for
    debugging.

    Returns the handler after adding it.
    """
    # This method needs to be in this __init__.py to get the __name__ correct
    # even if pooledhttp is vendored within another package.
    logger = logging.getLogger(__name__)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.debug("Added a stderr logging handler to logger: %s", __name__)
    return handler


# ... Clean up.
del NullHandler
