"""
Pure functions for parsing WebDAV XML responses.

All functions in this module are pure - they take XML bytes in and return
structured data out, with no side effects or I/O.
"""

import logging
from typing import Iterator, Optional
from urllib.parse import unquote, urlsplit

from lxml import etree

from davclient.elements import dav
from davclient.lib import error
from davclient.lib.url import SEPARATOR

log = logging.getLogger(__name__)


def iter_hrefs(
    body: Optional[bytes],
    base_path: str = SEPARATOR,
    server: str = "",
    directory_path: Optional[str] = None,
    relative_paths: bool = False,
    huge_tree: bool = False,
) -> Iterator[str]:
    """
    Lazily yield the hrefs of a PROPFIND multistatus body.

    Every DAV:href element is considered, no matter how deeply it is
    nested.  The text is percent-decoded.  With relative_paths set, the
    decoded href is split on the base path and only the last part is
    kept; the entry for the listed directory itself and the bare server
    origin are skipped.

    Args:
        body: Raw XML response bytes
        base_path: Normalized base path of the client
        server: Server origin of the client
        directory_path: The directory path the listing was requested for
        relative_paths: Rewrite hrefs relative to the base path
        huge_tree: Allow parsing very large XML documents

    Raises:
        ParseError: If body is not valid XML
    """
    if not body or not body.strip():
        return

    try:
        parser = etree.XMLParser(huge_tree=huge_tree)
        tree = etree.fromstring(body, parser)
    except etree.XMLSyntaxError as e:
        raise error.ParseError(reason=str(e)) from e

    if tree.tag != dav.MultiStatus.tag:
        error.weirdness("expected a multistatus element, got", tree)

    for href in tree.iter(dav.Href.tag):
        raw = href.text or ""
        if not relative_paths:
            yield unquote(raw)
            continue

        file_path = _relative_href(raw, base_path)
        if _is_self_entry(file_path, directory_path, server):
            log.debug(f"skipping self entry {file_path}")
            continue
        yield file_path


def parse_multistatus_hrefs(
    body: Optional[bytes],
    base_path: str = SEPARATOR,
    server: str = "",
    directory_path: Optional[str] = None,
    relative_paths: bool = False,
    huge_tree: bool = False,
) -> list[str]:
    """
    Eager version of iter_hrefs.

    Returns:
        List of decoded hrefs in document order, duplicates kept
    """
    return list(
        iter_hrefs(
            body,
            base_path=base_path,
            server=server,
            directory_path=directory_path,
            relative_paths=relative_paths,
            huge_tree=huge_tree,
        )
    )


# Helper functions


def _relative_href(href: str, base_path: str) -> str:
    """
    Decode the raw href, split it on the base path and return the last
    non-empty part.

    "/webdav/docs/a.txt" with base path "/webdav/" gives "docs/a.txt",
    "http://example.com/webdav/" gives "http://example.com".  If
    nothing is left (the href is the base path itself) an empty string
    is returned.

    Splitting on "/" would only leave the last path segment, so with
    the server root as base path the origin of an absolute href is
    dropped and the leading slash is stripped instead.  The origin is
    split off before decoding, so encoded "?", "#" and ";" stay part of
    the name.
    """
    if base_path == SEPARATOR:
        if "://" in href:
            href = urlsplit(href).path
        return unquote(href).lstrip(SEPARATOR)
    href = unquote(href)
    parts = [part for part in href.split(base_path) if part]
    if not parts:
        return ""
    return parts[-1]


def _is_self_entry(relative: str, directory_path: Optional[str], server: str) -> bool:
    """
    True for the entry describing the listed directory itself, and for
    the bare server origin which some servers deliver when the base path
    is stripped from an absolute href.
    """
    if relative.strip(SEPARATOR) == (directory_path or "").strip(SEPARATOR):
        return True
    return bool(server) and relative.rstrip(SEPARATOR) == server
