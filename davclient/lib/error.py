#!/usr/bin/env python
import logging
import os
from collections import defaultdict
from typing import Dict
from typing import Optional
from typing import Type

from davclient import __version__

## Environmental variables prepended with "PYTHON_DAVCLIENT" are used for debug purposes,
## environmental variables prepended with "WEBDAV_" are for connection parameters
## one of DEBUG_PDB, DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_DAVCLIENT_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("davclient")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons) -> None:
    from davclient.lib.debug import xmlstring

    reason = " : ".join([xmlstring(x) for x in reasons])
    log.warning(f"Deviation from expectations found: {reason}")
    if debugmode == "DEBUG_PDB":
        log.error(f"Dropping into debugger due to {reason}")
        import pdb

        pdb.set_trace()


class DAVError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class InvalidArgumentError(DAVError, ValueError):
    """
    A required argument (server, path, stream source or sink) was
    missing or empty.  Raised at the call site, before any request is
    sent.
    """

    pass


class TransportError(DAVError):
    """
    The HTTP call itself could not complete (network, DNS, TLS,
    timeout).  No status code is available.
    """

    pass


class StreamError(DAVError):
    """
    The upload source or the download sink failed while being opened,
    read or written.
    """

    pass


class ParseError(DAVError):
    """
    A multistatus body could not be parsed as XML.
    """

    pass


class ResponseError(DAVError):
    pass


class PropfindError(ResponseError):
    pass


class PutError(ResponseError):
    pass


class GetError(ResponseError):
    pass


class MkcolError(ResponseError):
    pass


class DeleteError(ResponseError):
    pass


class HeadError(ResponseError):
    pass


exception_by_method: Dict[str, Type[DAVError]] = defaultdict(lambda: ResponseError)
for method in (
    "propfind",
    "put",
    "get",
    "mkcol",
    "delete",
    "head",
):
    exception_by_method[method] = locals()[method[0].upper() + method[1:] + "Error"]
