"""
WebDAV protocol operations combining request building and response parsing.

This class provides a high-level interface to WebDAV operations while
remaining completely I/O-free.
"""

from typing import Any, Dict, FrozenSet, Optional

from davclient.config import ClientConfig
from davclient.lib import error
from davclient.lib.url import is_collection_path

from .types import DAVMethod, DAVRequest, DAVResponse, ListOutcome, RequestOutcome
from .xml_builders import build_propfind_body
from .xml_parsers import parse_multistatus_hrefs

## Status codes counted as success, per method
SUCCESS_STATUS: Dict[DAVMethod, FrozenSet[int]] = {
    DAVMethod.PROPFIND: frozenset((207,)),
    DAVMethod.PUT: frozenset((200, 201)),
    DAVMethod.GET: frozenset((200,)),
    DAVMethod.MKCOL: frozenset((200, 201)),
    DAVMethod.DELETE: frozenset((200, 204)),
    DAVMethod.HEAD: frozenset((200,)),
}

PROPFIND_BODY = build_propfind_body()


def _require(value: Any, name: str) -> None:
    if value is None or (isinstance(value, str) and not value):
        raise error.InvalidArgumentError(reason=f"{name} must be given")


class WebDAVProtocol:
    """
    Sans-I/O WebDAV protocol handler.

    Builds requests and classifies/parses responses without doing any
    I/O.  All HTTP communication is delegated to the client.

    Example:
        protocol = WebDAVProtocol(ClientConfig("https://dav.example.com", "/webdav"))

        # Build request
        request = protocol.list_request("/docs/")

        # Execute with your I/O (not shown)
        response = io.execute(request)

        # Parse response
        outcome = protocol.list_outcome(request, response, "/docs/")
    """

    def __init__(self, config: ClientConfig) -> None:
        self.config = config

    def _request(
        self,
        method: DAVMethod,
        path: Optional[str],
        collection: bool = False,
        headers: Optional[Dict[str, str]] = None,
        body: Any = None,
    ) -> DAVRequest:
        return DAVRequest(
            method=method,
            url=self.config.uri(path, collection),
            headers=dict(headers or {}),
            body=body,
            credentials=self.config.credentials(),
        )

    # ==================== Request Builders ====================

    def list_request(self, directory_path: Optional[str] = "/") -> DAVRequest:
        """PROPFIND with Depth 1 on the directory, as a collection."""
        return self._request(
            DAVMethod.PROPFIND,
            directory_path,
            collection=True,
            headers={"Depth": "1", "Content-Type": "text/xml"},
            body=PROPFIND_BODY,
        )

    def upload_request(self, destination_path: str, source: Any) -> DAVRequest:
        """PUT of the source to the destination path."""
        _require(destination_path, "destination_path")
        _require(source, "source")
        return self._request(DAVMethod.PUT, destination_path, body=source)

    def download_request(self, source_path: str) -> DAVRequest:
        _require(source_path, "source_path")
        return self._request(DAVMethod.GET, source_path)

    def mkcol_request(self, path: str) -> DAVRequest:
        _require(path, "path")
        return self._request(DAVMethod.MKCOL, path)

    def delete_request(self, path: str) -> DAVRequest:
        """
        DELETE of a resource.  A trailing slash in the path means that
        a collection is to be deleted, and the target URI keeps it.
        """
        _require(path, "path")
        return self._request(DAVMethod.DELETE, path, collection=is_collection_path(path))

    def exists_request(self, path: str) -> DAVRequest:
        _require(path, "path")
        return self._request(DAVMethod.HEAD, path)

    # ==================== Response Handling ====================

    @staticmethod
    def classify(method: DAVMethod, status: int) -> bool:
        """True if status is in the success set of the method."""
        return status in SUCCESS_STATUS[method]

    def outcome(self, request: DAVRequest, status: int) -> RequestOutcome:
        return RequestOutcome(
            success=self.classify(request.method, status),
            status=status,
            method=request.method,
            url=request.url,
        )

    def list_outcome(
        self,
        request: DAVRequest,
        response: DAVResponse,
        directory_path: Optional[str],
        relative_paths: bool = False,
        huge_tree: bool = False,
    ) -> ListOutcome:
        """
        Classify a PROPFIND response and parse the hrefs out of it.

        Entries are only parsed for a successful listing.  A body that
        is not XML gives an unsuccessful outcome carrying the
        ParseError, so that it can be told apart from an empty listing.
        """
        success = self.classify(request.method, response.status)
        outcome = ListOutcome(
            success=success,
            status=response.status,
            method=request.method,
            url=request.url,
        )
        if not success:
            return outcome
        try:
            outcome.entries = parse_multistatus_hrefs(
                response.body,
                base_path=self.config.base_path,
                server=self.config.server,
                directory_path=directory_path,
                relative_paths=relative_paths,
                huge_tree=huge_tree,
            )
        except error.ParseError as e:
            e.url = request.url
            outcome.success = False
            outcome.error = e
        return outcome
