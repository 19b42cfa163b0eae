#!/usr/bin/env python
"""
Async-first WebDAV client.

``AsyncDAVClient`` is the request engine of the library.  Every verb
method validates its arguments and builds the request right away (so
that bad arguments raise at the call site), and returns an awaitable
that sends the request and yields a ``RequestOutcome``.  Server
rejections and transport failures do not raise; they are folded into
the outcome.

For blocking usage, or for callbacks delivered from a background
event loop, see ``DAVClient`` in davclient.py.
"""

import asyncio
import sys
from collections.abc import Mapping
from functools import partial
from types import TracebackType
from typing import Any, Awaitable, Callable, Optional, Union

try:
    import niquests
    from niquests import AsyncSession
except ImportError as err:
    raise ImportError(
        "niquests library with async support is required for async_davclient. "
        "Install with: pip install niquests"
    ) from err

from davclient import __version__
from davclient.config import ClientConfig, find_connection_params
from davclient.lib import error
from davclient.lib.auth import extract_auth_types
from davclient.lib.error import log
from davclient.lib.python_utilities import to_normal_str, to_wire
from davclient.protocol.operations import WebDAVProtocol
from davclient.protocol.types import DAVRequest, DAVResponse, ListOutcome, RequestOutcome

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

## Size of the chunks read from the response body on downloads
CHUNK_SIZE = 64 * 1024

Callback = Callable[[RequestOutcome], Any]


def outcome_from_future(future, outcome_class: type = RequestOutcome) -> RequestOutcome:
    """
    Get the outcome of a finished operation.  The verb coroutines fold
    expected failures into the outcome themselves; anything else that
    escaped (or a cancellation) is folded in here, so that a callback
    always gets an outcome.
    """
    if future.cancelled():
        return outcome_class(
            success=False,
            status=0,
            error=error.DAVError(reason="operation was cancelled"),
        )
    exc = future.exception()
    if exc is not None:
        log.error("unexpected failure in WebDAV operation", exc_info=exc)
        return outcome_class(success=False, status=0, error=exc)
    return future.result()


def deliver(callback: Callback, outcome_class: type, future) -> None:
    """Done-callback of a scheduled operation: hands the outcome to the callback."""
    outcome = outcome_from_future(future, outcome_class)
    try:
        callback(outcome)
    except Exception:
        log.error(f"callback {callback!r} failed", exc_info=True)


def _open_source(source: Any) -> Any:
    """
    Resolve an upload source into something niquests can send: bytes or
    a binary file-like object.  Factories are called here, as late as
    possible.
    """
    if callable(source) and not hasattr(source, "read"):
        source = source()
    if source is None:
        raise error.StreamError(reason="the source factory returned None")
    if isinstance(source, str):
        return to_wire(source)
    return source


def _open_sink(sink: Any) -> Any:
    if callable(sink) and not hasattr(sink, "write"):
        sink = sink()
    if sink is None:
        raise error.StreamError(reason="the sink factory returned None")
    return sink


class AsyncDAVClient:
    """
    Async WebDAV client.

    The client is bound to one server and base path; all paths given to
    the verb methods are resolved against them.

    Example:
        async with AsyncDAVClient(url="https://dav.example.com/webdav/",
                                  username="user", password="secret") as client:
            listing = await client.list("/", relative_paths=True)
            for name in listing:
                print(name)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        server: Optional[str] = None,
        base_path: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        auth: Any = None,
        auth_type: Optional[str] = None,
        use_default_credentials: Optional[bool] = None,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        ssl_verify_cert: Union[bool, str] = True,
        ssl_cert: Union[str, tuple[str, str], None] = None,
        headers: Optional[Mapping[str, str]] = None,
        huge_tree: bool = False,
        config: Optional[ClientConfig] = None,
    ) -> None:
        """
        Initialize an async DAV client.

        Args:
            url: Full URL of the WebDAV root, i.e.
                 https://dav.example.com/remote.php/webdav/ - the path
                 part becomes the base path.
            server: Server origin (scheme://host[:port]), alternative to url.
            base_path: Base path on the server, defaults to the path of url or "/".
            username: Username for authentication.
            password: Password for authentication (the token for bearer auth).
            auth: Custom auth object (niquests.auth.AuthBase).
            auth_type: Auth type ('basic', 'digest' or 'bearer').
            use_default_credentials: Use ambient credentials (.netrc, environment)
                 instead of explicit ones.
            proxy: Proxy server (scheme://hostname:port).
            timeout: Request timeout in seconds.
            ssl_verify_cert: SSL certificate verification (bool or CA bundle path).
            ssl_cert: Client SSL certificate (path or (cert, key) tuple).
            headers: Additional headers for all requests.
            huge_tree: Enable XMLParser huge_tree for large listings (security consideration).
            config: Ready-made ClientConfig, replaces url/server/base_path and credentials.
        """
        if config is None:
            credentials = dict(
                username=username,
                password=password,
                auth=auth,
                auth_type=auth_type,
                use_default_credentials=use_default_credentials,
            )
            if url and not server:
                config = ClientConfig.from_url(url, base_path=base_path, **credentials)
            else:
                config = ClientConfig(server, base_path, **credentials)
        self.config = config
        self.protocol = WebDAVProtocol(config)
        self.session = AsyncSession()

        self.proxy = proxy
        if self.proxy is not None and "://" not in self.proxy:
            self.proxy = "http://" + self.proxy

        self.timeout = timeout
        self.ssl_verify_cert = ssl_verify_cert
        self.ssl_cert = ssl_cert
        self.huge_tree = huge_tree
        self.chunk_size = CHUNK_SIZE

        self.headers: dict[str, str] = {
            "User-Agent": f"davclient/{__version__}",
        }
        self.headers.update(headers or {})

    @property
    def url(self) -> str:
        """Absolute URI of the base path."""
        return self.config.uri(None, collection=True)

    async def __aenter__(self) -> Self:
        """Async context manager entry."""
        return self

    async def __aexit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the async session."""
        if hasattr(self, "session"):
            await self.session.close()

    # ==================== Transport ====================

    def _request_kwargs(self, request: DAVRequest) -> dict[str, Any]:
        combined_headers = self.headers.copy()
        combined_headers.update(request.headers)

        kwargs: dict[str, Any] = dict(
            headers=combined_headers,
            timeout=self.timeout,
            verify=self.ssl_verify_cert,
            cert=self.ssl_cert,
        )
        if self.proxy is not None:
            kwargs["proxies"] = {request.url.split(":", 1)[0]: self.proxy}
        ## With ambient credentials no auth is given, and niquests
        ## falls back to .netrc and the environment.
        if not request.credentials.use_default_credentials:
            kwargs["auth"] = request.credentials.auth
        return kwargs

    async def _send(self, request: DAVRequest, body: Any = None, stream: bool = False):
        """
        Send the request, return the niquests response.

        Raises:
            TransportError: If no response could be obtained
        """
        kwargs = self._request_kwargs(request)
        if isinstance(body, bytes):
            log.debug(
                f"sending request - method={request.method.value}, url={request.url}, "
                f"headers={kwargs['headers']}\nbody:\n{to_normal_str(body)}"
            )
        else:
            log.debug(
                f"sending request - method={request.method.value}, url={request.url}, "
                f"headers={kwargs['headers']}"
            )

        try:
            r = await self.session.request(
                request.method.value,
                request.url,
                data=body,
                stream=stream,
                **kwargs,
            )
        except (niquests.exceptions.RequestException, OSError) as e:
            raise error.TransportError(url=request.url, reason=str(e)) from e

        log.debug(f"server responded with {r.status_code} {r.reason}")
        if r.status_code == 401 and kwargs.get("auth") is None:
            msg = "Unauthorized, and no explicit credentials were configured."
            if r.headers.get("WWW-Authenticate"):
                auth_types = extract_auth_types(r.headers["WWW-Authenticate"])
                msg += " Supported authentication types: {}".format(", ".join(sorted(auth_types)))
            log.warning(msg)
        return r

    def _failure(
        self, request: DAVRequest, exc: error.DAVError, outcome_class: type = RequestOutcome, status: int = 0
    ) -> RequestOutcome:
        log.info(f"{request.method.value} {request.url} failed: {exc.reason}", exc_info=True)
        return outcome_class(
            success=False,
            status=status,
            method=request.method,
            url=request.url,
            error=exc,
        )

    async def _perform(self, request: DAVRequest) -> RequestOutcome:
        """Send a request without body and classify the status."""
        try:
            r = await self._send(request, body=request.body)
        except error.TransportError as e:
            return self._failure(request, e)
        return self.protocol.outcome(request, r.status_code)

    # ==================== Verbs ====================

    def list(self, directory_path: Optional[str] = "/", relative_paths: bool = False) -> Awaitable[ListOutcome]:
        """
        List the members of a collection (PROPFIND, Depth 1).

        Args:
            directory_path: Collection to list, relative to the base path.
            relative_paths: Return paths relative to the base path, and
                 leave out the entry for the collection itself.

        Returns:
            Awaitable ListOutcome; success iff the server answered 207.
        """
        request = self.protocol.list_request(directory_path)
        return self._list(request, directory_path, relative_paths)

    async def _list(self, request: DAVRequest, directory_path: Optional[str], relative_paths: bool) -> ListOutcome:
        try:
            r = await self._send(request, body=request.body)
        except error.TransportError as e:
            return self._failure(request, e, ListOutcome)

        response = DAVResponse(status=r.status_code, body=r.content or b"")
        outcome = self.protocol.list_outcome(
            request,
            response,
            directory_path,
            relative_paths=relative_paths,
            huge_tree=self.huge_tree,
        )
        if outcome.error is not None:
            log.info(
                "Expected some valid XML from the server, but got this: \n"
                + to_normal_str(response.body),
                exc_info=outcome.error,
            )
        return outcome

    def upload(self, source: Any, destination_path: str, close_source: bool = False) -> Awaitable[RequestOutcome]:
        """
        Upload content (PUT).

        Args:
            source: bytes, str, a binary file-like object, or a factory
                 returning one.  A factory is only called when the
                 request is sent.
            destination_path: Target path, relative to the base path.
            close_source: Close the source after the upload.

        Returns:
            Awaitable RequestOutcome; success iff the server answered 200 or 201.
        """
        request = self.protocol.upload_request(destination_path, source)
        return self._upload(request, close_source)

    async def _upload(self, request: DAVRequest, close_source: bool) -> RequestOutcome:
        try:
            body = _open_source(request.body)
        except OSError as e:
            return self._failure(request, error.StreamError(url=request.url, reason=str(e)))
        except error.StreamError as e:
            e.url = request.url
            return self._failure(request, e)

        try:
            r = await self._send(request, body=body)
        except error.TransportError as e:
            return self._failure(request, e)
        finally:
            if close_source and hasattr(body, "close"):
                body.close()
        return self.protocol.outcome(request, r.status_code)

    def download(self, source_path: str, sink: Any, close_sink: bool = False) -> Awaitable[RequestOutcome]:
        """
        Download content (GET) into a sink.

        The response body is copied into the sink whenever a response is
        obtained, also for error statuses; check the outcome to tell.

        Args:
            source_path: Path of the resource, relative to the base path.
            sink: A binary file-like object, or a factory returning one.
                 A factory is only called once the response is there.
            close_sink: Close the sink after the download.

        Returns:
            Awaitable RequestOutcome; success iff the server answered 200.
        """
        request = self.protocol.download_request(source_path)
        if sink is None:
            raise error.InvalidArgumentError(url=request.url, reason="sink must be given")
        return self._download(request, sink, close_sink)

    async def _download(self, request: DAVRequest, sink: Any, close_sink: bool) -> RequestOutcome:
        try:
            r = await self._send(request, stream=True)
        except error.TransportError as e:
            return self._failure(request, e)

        outcome = self.protocol.outcome(request, r.status_code)
        output = None
        try:
            output = _open_sink(sink)
            async for chunk in await r.iter_content(self.chunk_size):
                output.write(chunk)
        except niquests.exceptions.RequestException as e:
            return self._failure(
                request, error.TransportError(url=request.url, reason=str(e)), status=r.status_code
            )
        except (OSError, ValueError) as e:
            return self._failure(
                request, error.StreamError(url=request.url, reason=str(e)), status=r.status_code
            )
        except error.StreamError as e:
            e.url = request.url
            return self._failure(request, e, status=r.status_code)
        finally:
            await r.close()
            if close_sink and output is not None:
                output.close()
        return outcome

    def create_directory(self, path: str) -> Awaitable[RequestOutcome]:
        """
        Create a collection (MKCOL).

        Returns:
            Awaitable RequestOutcome; success iff the server answered 200 or 201.
        """
        return self._perform(self.protocol.mkcol_request(path))

    def delete(self, path: str) -> Awaitable[RequestOutcome]:
        """
        Delete a resource (DELETE).  A path ending with a slash is
        addressed as a collection.

        Returns:
            Awaitable RequestOutcome; success iff the server answered 200 or 204.
        """
        return self._perform(self.protocol.delete_request(path))

    def exists(self, path: str) -> Awaitable[RequestOutcome]:
        """
        Check whether a resource exists (HEAD).

        A transport failure means that existence could not be
        determined: the outcome is unsuccessful with status 0 and the
        TransportError attached.

        Returns:
            Awaitable RequestOutcome; success iff the server answered 200.
        """
        return self._perform(self.protocol.exists_request(path))

    # ==================== Convenience Wrappers ====================

    def upload_file(self, local_path: str, destination_path: str) -> Awaitable[RequestOutcome]:
        """Upload a local file; it is opened when the request is sent, and closed afterwards."""
        if not local_path:
            raise error.InvalidArgumentError(reason="local_path must be given")
        return self.upload(partial(open, local_path, "rb"), destination_path, close_source=True)

    def download_file(self, source_path: str, local_path: str) -> Awaitable[RequestOutcome]:
        """Download into a local file, which is created (or truncated) once the response is there."""
        if not local_path:
            raise error.InvalidArgumentError(reason="local_path must be given")
        return self.download(source_path, partial(open, local_path, "wb"), close_sink=True)

    # ==================== Callbacks ====================

    def schedule(
        self,
        operation: Awaitable[RequestOutcome],
        callback: Optional[Callback] = None,
        outcome_class: type = RequestOutcome,
    ) -> "asyncio.Future[RequestOutcome]":
        """
        Run an operation as a task on the running event loop, and call
        callback with its outcome exactly once when it is done.

        Example:
            client.schedule(client.exists("report.pdf"), lambda outcome: print(outcome.success))
        """
        task = asyncio.ensure_future(operation)
        if callback is not None:
            task.add_done_callback(partial(deliver, callback, outcome_class))
        return task


# ==================== Factory Function ====================


def get_davclient(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    **config_data: Any,
) -> AsyncDAVClient:
    """
    Get an async DAV client instance.

    Connection parameters are taken from the keyword arguments if any
    are given, else from `WEBDAV_`-prefixed environment variables, else
    from a configuration file.  See config.find_connection_params.

    Example:
        async with get_davclient(url="...", username="...", password="...") as client:
            outcome = await client.exists("report.pdf")
    """
    if not config_data:
        config_data = find_connection_params(
            check_config_file=check_config_file,
            config_file=config_file,
            config_section_name=config_section,
            environment=environment,
        )
    if not config_data.get("url") and not config_data.get("server"):
        raise error.InvalidArgumentError(
            reason="URL is required. Provide via url parameter or WEBDAV_URL environment variable."
        )
    return AsyncDAVClient(**config_data)
