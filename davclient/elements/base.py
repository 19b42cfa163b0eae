#!/usr/bin/env python
import sys
from typing import ClassVar
from typing import List
from typing import Optional

from lxml import etree
from lxml.etree import _Element

from davclient.lib.namespace import default_nsmap

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self


class BaseElement:
    """
    An XML element of a request body.  Elements are composed with +,
    i.e. ``dav.Propfind() + (dav.Prop() + dav.ResourceType())``, and
    turned into lxml with xmlelement().  The tag classes double as
    names for the elements looked up in responses.
    """

    tag: ClassVar[Optional[str]] = None

    def __init__(self) -> None:
        self.children: List[BaseElement] = []

    def __add__(self, other: "BaseElement") -> Self:
        self.children.append(other)
        return self

    def __repr__(self) -> str:
        return "%s(%s)" % (self.__class__.__name__, ", ".join(repr(c) for c in self.children))

    def xmlelement(self, parent: Optional[_Element] = None) -> _Element:
        if self.tag is None:
            raise ValueError("Unexpected value None for self.tag")

        if parent is None:
            root = etree.Element(self.tag, nsmap=default_nsmap)
        else:
            root = etree.SubElement(parent, self.tag)
        for child in self.children:
            child.xmlelement(root)
        return root
