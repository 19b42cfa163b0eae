#!/usr/bin/env python
from typing import ClassVar

from .base import BaseElement
from davclient.lib.namespace import ns


# Operations
class Propfind(BaseElement):
    tag: ClassVar[str] = ns("D", "propfind")


# Components / Data


class Prop(BaseElement):
    tag: ClassVar[str] = ns("D", "prop")


# Properties
class ResourceType(BaseElement):
    tag: ClassVar[str] = ns("D", "resourcetype")


class Href(BaseElement):
    tag: ClassVar[str] = ns("D", "href")


class MultiStatus(BaseElement):
    tag: ClassVar[str] = ns("D", "multistatus")
