"""Encoding of structured content into XLIFF 1.2 interchange files for the vendor."""
import logging
import os
from typing import Dict, Optional

from lxml import etree

from translation_sync.models import StructuredContent
from translation_sync.xliff_unpacker import (
    CHANNEL_ATTRIBUTE,
    META_KEY_ATTRIBUTE,
    TAXONOMY_TYPE_ATTRIBUTE,
    TERM_ID_ATTRIBUTE,
)

logger = logging.getLogger(__name__)

XLIFF_NAMESPACE = "urn:oasis:names:tc:xliff:document:1.2"
XLIFF_VERSION = "1.2"


def _tag(name: str) -> str:
    return f"{{{XLIFF_NAMESPACE}}}{name}"


def _add_unit(body: etree._Element, unit_id: int, channel: str, text: str,
              with_targets: bool, extra: Optional[Dict[str, str]] = None) -> None:
    unit = etree.SubElement(body, _tag("trans-unit"), id=str(unit_id))
    unit.set(CHANNEL_ATTRIBUTE, channel)
    for name, value in (extra or {}).items():
        unit.set(name, value)
    etree.SubElement(unit, _tag("source")).text = text
    if with_targets:
        etree.SubElement(unit, _tag("target")).text = text


def create_xliff(content: StructuredContent, original: Optional[str] = None, with_targets: bool = False) -> bytes:
    """
    Serialize content into an XLIFF document.

    Units are written in channel order: title, body, taxonomy terms, meta keys.

    Args:
        content: The fields to send for translation.
        original: Value of the <file original="..."> attribute, usually the content item id.
        with_targets: Also fill each <target> with the source text (pre-filled or pseudo translations).

    Returns:
        bytes: UTF-8 encoded XML with declaration.
    """
    root = etree.Element(_tag("xliff"), nsmap={None: XLIFF_NAMESPACE}, version=XLIFF_VERSION)
    container = etree.SubElement(root, _tag("file"))
    container.set("source-language", content.source_locale)
    container.set("target-language", content.target_locale)
    container.set("datatype", "plaintext")
    container.set("original", original or "")
    body = etree.SubElement(container, _tag("body"))

    unit_id = 0
    if content.title is not None:
        unit_id += 1
        _add_unit(body, unit_id, "title", content.title, with_targets)
    if content.body is not None:
        unit_id += 1
        _add_unit(body, unit_id, "body", content.body, with_targets)
    for taxonomy, terms in content.taxonomy_terms.items():
        for term_id, name in terms.items():
            unit_id += 1
            _add_unit(body, unit_id, "taxonomy", name, with_targets,
                      {TAXONOMY_TYPE_ATTRIBUTE: taxonomy, TERM_ID_ATTRIBUTE: str(term_id)})
    for meta_key, value in content.metadata.items():
        unit_id += 1
        _add_unit(body, unit_id, "meta", value, with_targets, {META_KEY_ATTRIBUTE: meta_key})

    logger.debug("Encoded %d trans-unit(s) for %s -> %s.", unit_id, content.source_locale, content.target_locale)
    return etree.tostring(root, xml_declaration=True, encoding="UTF-8", pretty_print=True)


def write_xliff_file(file_path: str, content: StructuredContent, original: Optional[str] = None,
                     with_targets: bool = False) -> None:
    """Write the encoded document to `file_path`, creating its folder if needed."""
    folder = os.path.dirname(file_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(file_path, "wb") as f:
        f.write(create_xliff(content, original=original, with_targets=with_targets))
    logger.info("Wrote interchange file '%s'.", file_path)
