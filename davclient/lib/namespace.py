#!/usr/bin/env python
from typing import Dict
from typing import Optional

nsmap: Dict[str, str] = {
    "D": "DAV:",
}

## Request bodies are serialized with DAV: as the default namespace,
## i.e. <propfind xmlns="DAV:">, which is what most servers document.
default_nsmap: Dict[Optional[str], str] = {None: nsmap["D"]}


def ns(prefix: str, tag: Optional[str] = None) -> str:
    name = "{%s}" % nsmap[prefix]
    if tag is not None:
        name = "%s%s" % (name, tag)
    return name
