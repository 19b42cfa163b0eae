"""
Core protocol types for the Sans-I/O WebDAV layer.

These dataclasses represent HTTP requests, responses and operation
outcomes at the protocol level, independent of any I/O implementation.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Optional

from davclient.config import Credentials
from davclient.lib import error


class DAVMethod(Enum):
    """WebDAV HTTP methods used by the client."""

    GET = "GET"
    PUT = "PUT"
    DELETE = "DELETE"
    PROPFIND = "PROPFIND"
    MKCOL = "MKCOL"
    HEAD = "HEAD"


@dataclass(frozen=True)
class DAVRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O. It describes what request
    should be made, but does not make it.

    Attributes:
        method: HTTP method (GET, PUT, PROPFIND, etc.)
        url: Full URL for the request
        headers: HTTP headers as dict
        body: Request body as bytes, or a body source for uploads
            (bytes, file-like object or a factory returning one)
        credentials: Credentials to attach when sending
    """

    method: DAVMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None
    credentials: Credentials = field(default_factory=Credentials)


@dataclass(frozen=True)
class DAVResponse:
    """
    The part of a received response the protocol layer looks at.  Only
    listings keep the body in memory; downloads stream it to the sink.

    Attributes:
        status: HTTP status code
        body: Response body as bytes
    """

    status: int
    body: bytes = b""


@dataclass
class RequestOutcome:
    """
    Result of one WebDAV operation.  Every completed operation yields
    exactly one.

    A status of 0 means no response was obtained at all (the error
    attribute then holds the TransportError or StreamError); a non-zero
    status with success False means the server answered with a status
    outside the success set of the method.

    Attributes:
        success: Whether the status code is in the success set of the method
        status: HTTP status code, 0 if there was no response
        method: The HTTP method that was sent
        url: The target URI of the request
        error: Exception folded into this outcome, if any
    """

    success: bool
    status: int
    method: Optional[DAVMethod] = None
    url: Optional[str] = None
    error: Optional[BaseException] = None

    def __bool__(self) -> bool:
        return self.success

    @property
    def responded(self) -> bool:
        """True if the server delivered a response."""
        return self.status != 0

    def raise_for_status(self) -> None:
        """
        Raise the error folded into this outcome, or the method specific
        ResponseError if the server rejected the request.
        """
        if self.success:
            return
        if self.error is not None:
            raise self.error
        method = self.method.value.lower() if self.method else ""
        raise error.exception_by_method[method](
            url=self.url, reason="server responded with status %i" % self.status
        )


@dataclass
class ListOutcome(RequestOutcome):
    """
    Result of a listing operation.

    Attributes:
        entries: Decoded hrefs found in the multistatus body, in
            document order.  Empty unless the listing succeeded.
    """

    entries: list[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
