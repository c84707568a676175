import re
from typing import Dict, Iterable, List, Set, Tuple

from translation_sync.models import LocalePairing, StructuredContent

# 'Ã' followed by a byte in 0x80-0xFF: UTF-8 text that was decoded as latin-1/cp1252.
MOJIBAKE_PATTERN = re.compile(r'Ã[\x80-\xff]')


def check_locale_pair(content: StructuredContent, pairing: LocalePairing) -> List[str]:
    """
    Checks that a returned document belongs to the active language pairing.

    Args:
        content: The decoded interchange document.
        pairing: Source and targets of the active project options.

    Returns:
        A list of error messages. An empty list means the pair is accepted.
    """
    errors = []
    if content.source_locale.lower() != pairing.source.lower():
        errors.append(
            f"Source language '{content.source_locale}' does not match the configured source '{pairing.source}'."
        )
    targets = {target.lower() for target in pairing.targets}
    if content.target_locale.lower() not in targets:
        errors.append(f"Target language '{content.target_locale}' is not a configured target.")
    return errors


def check_term_coverage(expected_terms: Dict[str, Iterable[str]],
                        content: StructuredContent) -> Tuple[Dict[str, Set[str]], Dict[str, Set[str]]]:
    """
    Compares the taxonomy terms sent for translation with the ones that came back.

    Args:
        expected_terms: Term ids sent, per taxonomy.
        content: The decoded interchange document.

    Returns:
        A tuple containing two dicts keyed by taxonomy (taxonomies without differences are omitted):
        - missing_terms: Term ids sent but not returned.
        - extra_terms: Term ids returned but never sent.
    """
    missing_terms: Dict[str, Set[str]] = {}
    extra_terms: Dict[str, Set[str]] = {}
    for taxonomy in set(expected_terms) | set(content.taxonomy_terms):
        sent = {str(term_id) for term_id in expected_terms.get(taxonomy, ())}
        returned = set(content.taxonomy_terms.get(taxonomy, {}))
        if sent - returned:
            missing_terms[taxonomy] = sent - returned
        if returned - sent:
            extra_terms[taxonomy] = returned - sent
    return missing_terms, extra_terms


def check_mojibake(content: StructuredContent) -> List[str]:
    """Flags decoded values showing double-encoding patterns or the Unicode replacement character."""
    errors = []
    for label, value in content.all_values():
        if MOJIBAKE_PATTERN.search(value):
            errors.append(f"Potential mojibake detected in {label}. Found patterns like 'Ã¼', 'Ã¤', etc.")
        if '\uFFFD' in value:
            errors.append(f"{label} contains the Unicode replacement character (U+FFFD).")
    return errors
