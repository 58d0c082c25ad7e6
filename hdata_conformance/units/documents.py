"""Tests for section document creation (section 6.4.2).

6.4.2.2 POST Add new document: if the request is successful the server
returns 201 with a Location header containing the URI of the new document.
If the content cannot be validated against the media type and the XML
schema of the section, the server MUST return 400.
"""

import logging
from typing import TYPE_CHECKING

from hdata_conformance.units.base import (
    MIME_APPLICATION_XML,
    MIME_TEXT_PLAIN,
    Prerequisites,
    TestUnit,
    dump_response,
)
from hdata_conformance.units.root_xml import BaseUrlRootXml

if TYPE_CHECKING:
    from hdata_conformance.context import Context

log = logging.getLogger(__name__)


class DocumentCreate(TestUnit):
    """6.4.2.2 POST on baseURL/sectionpath adds a new document."""

    test_id = "6.4.2.2"
    name = "POST operation on baseURL/sectionpath adds a new Document"
    dependencies = (BaseUrlRootXml,)

    async def execute(self, context: "Context", prerequisites: Prerequisites) -> None:
        extension_path_map = prerequisites.get(BaseUrlRootXml).extension_path_map
        if not extension_path_map:
            self.skip(
                f"Failed to retrieve prerequisite test results: {BaseUrlRootXml.test_id}"
            )

        extension = context.get_string("document.extension")
        if extension is None or not extension.strip():
            self.skip("Failed to specify valid section extension property in configuration")

        section_path = extension_path_map.get(extension)
        if section_path is None:
            self.skip(f"Failed to find section for extension {extension} in root.xml")

        log.info("section path: %s", section_path)
        await self.send_request(context, section_path)

    async def send_request(self, context: "Context", section_path: str) -> None:
        document = context.get_property_as_file("document.file")
        if document is None:
            self.skip("Failed to specify valid document file property in configuration")

        async with context.request(
            "POST",
            context.url(section_path),
            data=document.read_bytes(),
            headers={"Content-Type": MIME_APPLICATION_XML},
        ) as response:
            dump_response("POST", response)
            self.assert_equals(201, response.status, "Unexpected HTTP status code")
            if "Location" not in response.headers:
                log.warning("201 response for %s has no Location header", self.test_id)
        self.set_status("success")


class DocumentBadCreate(DocumentCreate):
    """6.4.2.4 POST with invalid content on baseURL/sectionpath returns 400."""

    test_id = "6.4.2.4"
    name = "POST operation on baseURL/sectionpath with invalid content returns 400 status code"

    async def send_request(self, context: "Context", section_path: str) -> None:
        async with context.request(
            "POST",
            context.url(section_path),
            data=b"plain text",
            headers={"Content-Type": f"{MIME_TEXT_PLAIN}; charset=UTF-8"},
        ) as response:
            dump_response("POST", response)
            self.assert_equals(400, response.status, "Unexpected HTTP status code")
        self.set_status("success")
