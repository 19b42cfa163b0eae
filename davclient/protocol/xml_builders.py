"""
Pure functions for building WebDAV XML request bodies.

All functions in this module are pure - they take data in and return XML out,
with no side effects or I/O.
"""
from lxml import etree

from davclient.elements import dav


def build_propfind_body() -> bytes:
    """
    Build the PROPFIND request body used for directory listings.

    Only the resourcetype property is requested, which is enough for the
    server to enumerate the members of a collection while keeping the
    response small.

    Returns:
        UTF-8 encoded XML bytes
    """
    propfind = dav.Propfind() + (dav.Prop() + dav.ResourceType())

    return etree.tostring(propfind.xmlelement(), encoding="utf-8", xml_declaration=True)
