"""Tests for the baseURL/root.xml resource (section 6.3)."""

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING
from xml.etree.ElementTree import Element

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

from hdata_conformance.errors import AssertionFailure
from hdata_conformance.units.base import Prerequisites, TestUnit, dump_response

if TYPE_CHECKING:
    from hdata_conformance.context import Context

log = logging.getLogger(__name__)

HDATA_CORE_NS = "http://projecthdata.org/hdata/schemas/2009/06/core"


def _tag(name: str) -> str:
    return f"{{{HDATA_CORE_NS}}}{name}"


def parse_extension_path_map(root: Element) -> Mapping[str, str]:
    """Map each extension URI to the path of the section that uses it.

    Nested section paths are joined with "/" to their parent path.
    """
    extensions = {
        ext.get("extensionId"): (ext.text or "").strip()
        for ext in root.iterfind(f"{_tag('extensions')}/{_tag('extension')}")
    }
    paths: dict[str, str] = {}

    def walk(sections: Iterable[Element], prefix: str) -> None:
        for section in sections:
            path = prefix + (section.get("path") or "")
            extension = extensions.get(section.get("extensionId"))
            if extension:
                paths.setdefault(extension, path)
            else:
                log.warning("Section %s references unknown extensionId", path)
            walk(section.iterfind(_tag("section")), path + "/")

    for sections in root.iterfind(_tag("sections")):
        walk(sections.iterfind(_tag("section")), "")
    return paths


class BaseUrlRootXml(TestUnit):
    """6.3.1.1 GET baseURL/root.xml returns the root document.

    Dependents read ``extension_path_map`` to locate sections.
    """

    test_id = "6.3.1.1"
    name = "GET operation on baseURL/root.xml returns 200 and a valid root document"

    def __init__(self) -> None:
        super().__init__()
        self.extension_path_map: Mapping[str, str] = {}

    async def execute(self, context: "Context", prerequisites: Prerequisites) -> None:
        async with context.request("GET", context.url("root.xml")) as response:
            dump_response("GET", response)
            self.assert_equals(200, response.status, "Unexpected HTTP status code")
            body = await response.read()

        try:
            root = DefusedET.fromstring(body)
        except (DefusedET.ParseError, DefusedXmlException) as e:
            raise AssertionFailure(f"root.xml is not a valid XML document: {e}") from e

        self.assert_equals(_tag("root"), root.tag, "Unexpected root.xml document element")
        self.extension_path_map = parse_extension_path_map(root)
        log.debug("root.xml sections: %s", self.extension_path_map)
        self.set_status("success")


class BaseUrlRootXmlPut(TestUnit):
    """6.3.2.2 PUT on baseURL/root.xml MUST NOT be implemented."""

    test_id = "6.3.2.2"
    name = "baseURL/root.xml PUT operation MUST NOT be implemented. Returns 405 status"

    async def execute(self, context: "Context", prerequisites: Prerequisites) -> None:
        async with context.request("PUT", context.url("root.xml")) as response:
            dump_response("PUT", response)
            self.assert_equals(405, response.status, "Unexpected HTTP status code")
        self.set_status("success")
