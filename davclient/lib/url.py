#!/usr/bin/env python
"""
Composition of resource URIs.

Addresses handed to the client may be one out of two:

1) a path relative to the configured base path, i.e. "docs/report.pdf"
   on a client configured with server "http://dav.example.com" and base
   path "/remote.php/webdav" refers to
   "http://dav.example.com/remote.php/webdav/docs/report.pdf".

2) an "absolute" path, i.e. "/docs/report.pdf".  It is still resolved
   against the base path; leading and trailing slashes are not
   significant.

A trailing slash is only significant for the delete operation, where it
tells that a collection is to be deleted.
"""
import re
from typing import Optional
from typing import Tuple
from urllib.parse import quote
from urllib.parse import unquote
from urllib.parse import urlparse

SEPARATOR = "/"

## Characters allowed in a path without quoting.  "%" is included so
## that paths which are already percent-encoded pass through untouched;
## a "%" not followed by two hex digits is escaped by _quote_path.
_SAFE_PATH_CHARS = "/%:@!$&'()*+,;=~"
_STRAY_PERCENT = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize_server(server: Optional[str]) -> str:
    """
    Strip trailing slashes from the server origin.  Returns an empty
    string for a missing server, it is up to the caller to reject it.
    """
    if not server:
        return ""
    return server.rstrip(SEPARATOR)


def normalize_base_path(base_path: Optional[str]) -> str:
    """
    The base path always starts and ends with a slash.  A missing or
    empty base path denotes the server root.
    """
    if not base_path:
        return SEPARATOR
    trimmed = base_path.strip(SEPARATOR)
    if not trimmed:
        return SEPARATOR
    return "%s%s%s" % (SEPARATOR, trimmed, SEPARATOR)


def split_url(url: str) -> Tuple[str, str]:
    """
    Split a full URL like "https://dav.example.com/remote.php/webdav/"
    into server origin and base path.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return (normalize_server(url), SEPARATOR)
    ## credentials in the URL are not part of the server origin
    netloc = parsed.netloc.rsplit("@", 1)[-1]
    server = "%s://%s" % (parsed.scheme, netloc)
    return (server, normalize_base_path(unquote(parsed.path)))


def _quote_path(path: str) -> str:
    return quote(_STRAY_PERCENT.sub("%25", path), safe=_SAFE_PATH_CHARS)


def is_collection_path(path: Optional[str]) -> bool:
    return bool(path) and path.endswith(SEPARATOR)


def make_uri(server: str, base_path: str, path: Optional[str], collection: bool = False) -> str:
    """
    Resolve a client path against server and base path.

    The path is trimmed for slashes and quoted.  Percent-escapes already
    in the path are kept as they are, so "a%20b.txt" addresses "a b.txt";
    any other "%" is taken literally, "100%.txt" becomes "100%25.txt".
    If collection is set, the result ends with exactly one slash,
    otherwise with none (except when the path is empty, then the base
    path itself is addressed).
    """
    trimmed = (path or "").strip(SEPARATOR)
    complete_path = _quote_path(base_path)
    if trimmed:
        complete_path += _quote_path(trimmed)
        if collection:
            complete_path += SEPARATOR
    return "%s%s" % (server, complete_path)
