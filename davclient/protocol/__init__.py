"""
Sans-I/O WebDAV protocol implementation.

This module provides protocol-level operations without any I/O.
It builds requests and classifies and parses responses as pure data
transformations.

The protocol layer is organized into:
- types: Core data structures (DAVRequest, DAVResponse, outcome types)
- xml_builders: Pure functions to build XML request bodies
- xml_parsers: Pure functions to parse XML response bodies
- operations: WebDAVProtocol class combining builders and parsers

Example usage:

    from davclient.config import ClientConfig
    from davclient.protocol import WebDAVProtocol

    protocol = WebDAVProtocol(ClientConfig("https://dav.example.com", "/webdav"))

    # Build a request (no I/O)
    request = protocol.list_request("/docs/")

    # Execute via your preferred I/O (sync, async, or mock)
    response = your_http_client.execute(request)

    # Classify and parse the response (no I/O)
    outcome = protocol.list_outcome(request, response, "/docs/", relative_paths=True)
"""

from .operations import SUCCESS_STATUS, WebDAVProtocol
from .types import (
    # Enums
    DAVMethod,
    # Request/Response
    DAVRequest,
    DAVResponse,
    # Outcome types
    ListOutcome,
    RequestOutcome,
)
from .xml_builders import build_propfind_body
from .xml_parsers import iter_hrefs, parse_multistatus_hrefs

__all__ = [
    "DAVMethod",
    "DAVRequest",
    "DAVResponse",
    "ListOutcome",
    "RequestOutcome",
    "SUCCESS_STATUS",
    "WebDAVProtocol",
    "build_propfind_body",
    "iter_hrefs",
    "parse_multistatus_hrefs",
]
