#!/usr/bin/env python
import logging

__version__ = "0.3.0"

from .async_davclient import AsyncDAVClient
from .config import ClientConfig
from .davclient import DAVClient
from .davclient import get_davclient
from .protocol.types import ListOutcome
from .protocol.types import RequestOutcome

## Silence notification of no default logging handler
log = logging.getLogger("davclient")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = [
    "__version__",
    "AsyncDAVClient",
    "ClientConfig",
    "DAVClient",
    "ListOutcome",
    "RequestOutcome",
    "get_davclient",
]
