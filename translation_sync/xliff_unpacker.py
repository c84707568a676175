"""
Decoding of vendor interchange (XLIFF) files into structured content.

A document carries one <file> container with the language pair and any
number of <trans-unit> elements. Each unit is routed by its `resname`
attribute into the title, body, taxonomy or meta channel; anything else is
ignored so newer vendor channels do not break older readers.
"""
import logging
import os
from typing import Dict, Iterable, List, Optional, Tuple, Union

from lxml import etree
from tqdm import tqdm

from translation_sync.errors import MalformedInterchangeError
from translation_sync.models import StructuredContent

logger = logging.getLogger(__name__)

CHANNEL_ATTRIBUTE = "resname"
TAXONOMY_TYPE_ATTRIBUTE = "wp_taxonomy"
TERM_ID_ATTRIBUTE = "wp_id"
META_KEY_ATTRIBUTE = "wp_meta"

INTERCHANGE_EXTENSIONS = (".xliff", ".xlf", ".sdlxliff", ".xml")


def _make_parser() -> etree.XMLParser:
    # Vendor files are untrusted input: no entity expansion, no network fetches.
    return etree.XMLParser(resolve_entities=False, no_network=True, remove_blank_text=False)


def _target_text(unit: etree._Element) -> str:
    """
    Flattened text of the unit's first <target>, or '' when it has none.

    Inline markup inside the target (<g>, <x/>, <mrk> ...) is dropped and only
    its character data is kept.
    """
    target = next(unit.iter("{*}target"), None)
    if target is None:
        return ""
    return etree.tostring(target, method="text", encoding="unicode", with_tail=False)


def _extract_attributes(root: etree._Element) -> Tuple[str, str]:
    """Read the language pair from the first <file> directly under the document root."""
    container = root.find("{*}file")
    if container is None:
        raise MalformedInterchangeError("Interchange document has no <file> container element.")
    return container.get("source-language", ""), container.get("target-language", "")


def _required_attribute(unit: etree._Element, name: str, index: int, channel: str) -> Optional[str]:
    value = unit.get(name)
    if not value:
        logger.warning(
            "Skipping %s trans-unit #%d (id=%s): missing '%s' attribute.",
            channel, index, unit.get("id"), name
        )
        return None
    return value


def _extract_structure(root: etree._Element, content: StructuredContent) -> None:
    for index, unit in enumerate(root.iter("{*}trans-unit")):
        channel = unit.get(CHANNEL_ATTRIBUTE)

        if channel == "title":
            content.title = _target_text(unit)
        elif channel == "body":
            content.body = _target_text(unit)
        elif channel == "taxonomy":
            taxonomy = _required_attribute(unit, TAXONOMY_TYPE_ATTRIBUTE, index, channel)
            term_id = _required_attribute(unit, TERM_ID_ATTRIBUTE, index, channel)
            if taxonomy is None or term_id is None:
                continue
            content.taxonomy_terms.setdefault(taxonomy, {})[term_id] = _target_text(unit)
        elif channel == "meta":
            meta_key = _required_attribute(unit, META_KEY_ATTRIBUTE, index, channel)
            if meta_key is None:
                continue
            content.metadata[meta_key] = _target_text(unit)
        else:
            logger.debug("Ignoring trans-unit #%d with unknown channel '%s'.", index, channel)


def _decode_tree(root: etree._Element) -> StructuredContent:
    source_locale, target_locale = _extract_attributes(root)
    content = StructuredContent(source_locale=source_locale, target_locale=target_locale)
    _extract_structure(root, content)
    return content


def parse_xliff_string(document: Union[str, bytes]) -> StructuredContent:
    """
    Decode an interchange document held in memory.

    Args:
        document: The XLIFF text or raw bytes.

    Returns:
        StructuredContent: Language pair plus the translated title, body,
        taxonomy terms and meta values.

    Raises:
        MalformedInterchangeError: The document cannot be parsed or has no <file> container.
    """
    if isinstance(document, str):
        # lxml refuses str input that carries an encoding declaration.
        document = document.encode("utf-8")
    try:
        root = etree.fromstring(document, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        logger.error("Unparsable interchange document: %s", e)
        raise MalformedInterchangeError(f"Unparsable interchange document: {e}") from e
    return _decode_tree(root)


def parse_xliff_file(file_path: str) -> StructuredContent:
    """
    Decode an interchange file from disk.

    Raises:
        MalformedInterchangeError: The file is not well-formed XML or lacks a <file> container.
        OSError: The file cannot be read.
    """
    try:
        tree = etree.parse(file_path, parser=_make_parser())
    except etree.XMLSyntaxError as e:
        logger.error("Unparsable interchange file '%s': %s", file_path, e)
        raise MalformedInterchangeError(
            f"Unparsable interchange file '{file_path}': {e}", details={"file": file_path}
        ) from e
    try:
        return _decode_tree(tree.getroot())
    except MalformedInterchangeError as e:
        e.details.setdefault("file", file_path)
        logger.error("Interchange file '%s' rejected: %s", file_path, e)
        raise


def list_interchange_files(folder: str, extensions: Iterable[str] = INTERCHANGE_EXTENSIONS) -> List[str]:
    """Interchange files directly inside `folder`, sorted by name."""
    suffixes = tuple(ext.lower() for ext in extensions)
    return sorted(
        name for name in os.listdir(folder)
        if name.lower().endswith(suffixes) and os.path.isfile(os.path.join(folder, name))
    )


def unpack_folder(folder: str) -> Tuple[Dict[str, StructuredContent], Dict[str, List[str]]]:
    """
    Decode every interchange file in a folder.

    A file that fails to decode is reported, not fatal for the batch.

    Returns:
        A tuple of (decoded contents keyed by filename, errors keyed by filename).
    """
    decoded: Dict[str, StructuredContent] = {}
    failures: Dict[str, List[str]] = {}

    filenames = list_interchange_files(folder)
    logger.info("Found %d interchange file(s) in '%s'.", len(filenames), folder)
    for filename in tqdm(filenames, desc="Unpacking", unit="file"):
        file_path = os.path.join(folder, filename)
        try:
            decoded[filename] = parse_xliff_file(file_path)
        except MalformedInterchangeError as e:
            failures[filename] = [str(e)]
        except OSError as e:
            logger.error("Could not read interchange file '%s': %s", file_path, e)
            failures[filename] = [f"Could not read file. Reason: {e}"]

    return decoded, failures
