#!/usr/bin/env python
"""
Blocking WebDAV client - wrapper around AsyncDAVClient using anyio.

All operations of a ``DAVClient`` run on one background event loop
owned by the client (an anyio blocking portal).  Each operation comes
in two forms:

* ``name_async(..., callback=None)`` schedules the operation and
  returns a ``concurrent.futures.Future``; the callback, if given, is
  called with the outcome exactly once, on the event loop thread.
* ``name(...)`` blocks until the outcome is there.  It is built on the
  callback form through ``call_blocking``.
"""
import sys
import threading
from concurrent.futures import Future
from functools import partial
from typing import Any
from typing import Callable
from typing import Mapping
from typing import Optional
from typing import Tuple
from typing import Union

from anyio.from_thread import start_blocking_portal

from davclient.async_davclient import AsyncDAVClient
from davclient.config import ClientConfig
from davclient.config import find_connection_params
from davclient.lib import error
from davclient.lib.error import log
from davclient.protocol.types import ListOutcome
from davclient.protocol.types import RequestOutcome

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

Callback = Callable[[RequestOutcome], Any]


def call_blocking(start: Callable[..., Any], *args, **kwargs) -> Any:
    """
    Turn a callback-style operation into a blocking call.

    start is called with the given arguments plus a callback, and must
    call the callback exactly once with the result.  Exceptions raised
    by start itself (i.e. invalid arguments) propagate to the caller.

    Example:
        outcome = call_blocking(client.exists_async, "report.pdf")
    """
    signal: Future = Future()
    start(*args, callback=signal.set_result, **kwargs)
    return signal.result()


async def _run(schedule, operation, callback, outcome_class):
    ## Scheduled from inside the loop, so that callbacks always run on it
    return await schedule(operation, callback, outcome_class)


def _copy_outcome(future: Future, task) -> None:
    if task.cancelled():
        future.cancel()
    elif task.exception() is not None:
        future.set_exception(task.exception())
    else:
        future.set_result(task.result())


class DAVClient:
    """
    Blocking WebDAV client.

    Takes the same parameters as AsyncDAVClient.  The client must be
    closed after use, either through close() or by using it as a
    context manager.

    Example:
        with DAVClient(url="https://dav.example.com/webdav/",
                       username="user", password="secret") as client:
            client.upload(b"hello", "greeting.txt")
            for name in client.list("/", relative_paths=True):
                print(name)
    """

    def __init__(
        self,
        url: Optional[str] = None,
        server: Optional[str] = None,
        base_path: Optional[str] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        auth=None,
        auth_type: Optional[str] = None,
        use_default_credentials: Optional[bool] = None,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        ssl_verify_cert: Union[bool, str] = True,
        ssl_cert: Union[str, Tuple[str, str], None] = None,
        headers: Mapping[str, str] = None,
        huge_tree: bool = False,
        config: Optional[ClientConfig] = None,
    ) -> None:
        """
        Initialize blocking DAV client.

        All parameters are passed to AsyncDAVClient.
        """
        self._portal_cm = start_blocking_portal()
        self._portal = self._portal_cm.__enter__()
        self._closed = False
        try:
            ## The session is created on the event loop it will be used from
            self._async = self._portal.call(
                partial(
                    AsyncDAVClient,
                    url=url,
                    server=server,
                    base_path=base_path,
                    username=username,
                    password=password,
                    auth=auth,
                    auth_type=auth_type,
                    use_default_credentials=use_default_credentials,
                    proxy=proxy,
                    timeout=timeout,
                    ssl_verify_cert=ssl_verify_cert,
                    ssl_cert=ssl_cert,
                    headers=headers,
                    huge_tree=huge_tree,
                    config=config,
                )
            )
            self._loop_thread = self._portal.call(threading.get_ident)
        except BaseException:
            self._closed = True
            self._portal_cm.__exit__(*sys.exc_info())
            raise

    # Expose commonly accessed attributes
    @property
    def config(self) -> ClientConfig:
        return self._async.config

    @property
    def url(self) -> str:
        return self._async.url

    @property
    def headers(self):
        return self._async.headers

    @property
    def huge_tree(self) -> bool:
        return self._async.huge_tree

    @property
    def timeout(self):
        return self._async.timeout

    @property
    def proxy(self):
        return self._async.proxy

    @property
    def username(self):
        return self.config.username

    @username.setter
    def username(self, value):
        self.config.username = value

    @property
    def password(self):
        return self.config.password

    @password.setter
    def password(self, value):
        self.config.password = value

    @property
    def use_default_credentials(self) -> bool:
        return self.config.use_default_credentials

    @use_default_credentials.setter
    def use_default_credentials(self, value: bool):
        self.config.use_default_credentials = value

    def __enter__(self) -> Self:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        """Close the session and stop the event loop thread."""
        if self._closed:
            return
        self._closed = True
        try:
            self._portal.call(self._async.close)
        finally:
            self._portal_cm.__exit__(None, None, None)

    # ==================== Scheduling ====================

    def _schedule(
        self,
        operation,
        callback: Optional[Callback],
        outcome_class: type = RequestOutcome,
    ) -> "Future[RequestOutcome]":
        if self._closed:
            operation.close()
            raise RuntimeError("this DAVClient is closed")
        if not self._on_loop_thread():
            return self._portal.start_task_soon(_run, self._async.schedule, operation, callback, outcome_class)
        ## From a callback the loop is running in this very thread, and
        ## the portal refuses to be used
        future: Future = Future()
        task = self._async.schedule(operation, callback, outcome_class)
        task.add_done_callback(partial(_copy_outcome, future))
        return future

    def _on_loop_thread(self) -> bool:
        return threading.get_ident() == getattr(self, "_loop_thread", None)

    def _blocking(self, start: Callable[..., Any], *args, **kwargs) -> Any:
        if self._on_loop_thread():
            raise RuntimeError(
                "blocking DAVClient methods cannot be called from a callback, "
                "use the _async variants there"
            )
        return call_blocking(start, *args, **kwargs)

    # ==================== Callback Operations ====================

    def list_async(
        self,
        directory_path: Optional[str] = "/",
        relative_paths: bool = False,
        callback: Optional[Callback] = None,
    ) -> "Future[ListOutcome]":
        """Schedule a listing, see AsyncDAVClient.list"""
        return self._schedule(self._async.list(directory_path, relative_paths), callback, ListOutcome)

    def upload_async(
        self,
        source: Any,
        destination_path: str,
        close_source: bool = False,
        callback: Optional[Callback] = None,
    ) -> "Future[RequestOutcome]":
        """Schedule an upload, see AsyncDAVClient.upload"""
        return self._schedule(self._async.upload(source, destination_path, close_source), callback)

    def download_async(
        self,
        source_path: str,
        sink: Any,
        close_sink: bool = False,
        callback: Optional[Callback] = None,
    ) -> "Future[RequestOutcome]":
        """Schedule a download, see AsyncDAVClient.download"""
        return self._schedule(self._async.download(source_path, sink, close_sink), callback)

    def create_directory_async(self, path: str, callback: Optional[Callback] = None) -> "Future[RequestOutcome]":
        return self._schedule(self._async.create_directory(path), callback)

    def delete_async(self, path: str, callback: Optional[Callback] = None) -> "Future[RequestOutcome]":
        return self._schedule(self._async.delete(path), callback)

    def exists_async(self, path: str, callback: Optional[Callback] = None) -> "Future[RequestOutcome]":
        return self._schedule(self._async.exists(path), callback)

    def upload_file_async(
        self, local_path: str, destination_path: str, callback: Optional[Callback] = None
    ) -> "Future[RequestOutcome]":
        return self._schedule(self._async.upload_file(local_path, destination_path), callback)

    def download_file_async(
        self, source_path: str, local_path: str, callback: Optional[Callback] = None
    ) -> "Future[RequestOutcome]":
        return self._schedule(self._async.download_file(source_path, local_path), callback)

    # ==================== Blocking Operations ====================

    def list(self, directory_path: Optional[str] = "/", relative_paths: bool = False) -> ListOutcome:
        """
        List the members of a collection.

        Returns:
            ListOutcome, iterable over the entries

        Raises:
            ParseError: If the server answered 207 with a body that is not XML
        """
        outcome = self._blocking(self.list_async, directory_path, relative_paths)
        if isinstance(outcome.error, error.ParseError):
            raise outcome.error
        return outcome

    def upload(self, source: Any, destination_path: str, close_source: bool = False) -> RequestOutcome:
        """Upload bytes, str, a binary file-like object or a factory returning one."""
        return self._blocking(self.upload_async, source, destination_path, close_source)

    def download(self, source_path: str, sink: Any, close_sink: bool = False) -> RequestOutcome:
        """Download into a binary file-like object, or a factory returning one."""
        return self._blocking(self.download_async, source_path, sink, close_sink)

    def create_directory(self, path: str) -> RequestOutcome:
        return self._blocking(self.create_directory_async, path)

    def delete(self, path: str) -> RequestOutcome:
        return self._blocking(self.delete_async, path)

    def exists(self, path: str) -> RequestOutcome:
        return self._blocking(self.exists_async, path)

    def upload_file(self, local_path: str, destination_path: str) -> RequestOutcome:
        return self._blocking(self.upload_file_async, local_path, destination_path)

    def download_file(self, source_path: str, local_path: str) -> RequestOutcome:
        return self._blocking(self.download_file_async, source_path, local_path)


def get_davclient(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    **config_data,
) -> "DAVClient":
    """
    This function will yield a DAVClient object.  It will not try to
    connect.  It will read configuration from various sources, dependent
    on the parameters given, in this order:

    * Data from the parameters given
    * Environment variables prepended with `WEBDAV_`, like `WEBDAV_URL`, `WEBDAV_USERNAME`, `WEBDAV_PASSWORD`.
    * Environment variables `WEBDAV_CONFIG_FILE` and `WEBDAV_CONFIG_SECTION` will be honored if environment is set
    * Configuration file, see config.read_config

    Returns None if no connection parameters were found.
    """
    if config_data:
        return DAVClient(**config_data)

    conn_params = find_connection_params(
        check_config_file=check_config_file,
        config_file=config_file,
        config_section_name=config_section,
        environment=environment,
    )
    if conn_params:
        return DAVClient(**conn_params)
    log.info("no connection parameters found")
    return None
