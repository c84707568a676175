import logging
from typing import Any, Dict, Set

from translation_sync.errors import IncomparableRevisionError
from translation_sync.models import StalenessRecord, TranslationGroup

logger = logging.getLogger(__name__)


def is_newer(marker: Any, reference: Any) -> bool:
    """True when `marker` advanced past `reference`; unknown markers never count as newer."""
    if marker is None or reference is None:
        return False
    return marker > reference


def compute_staleness(group: TranslationGroup, active_locales: Set[str]) -> Dict[str, StalenessRecord]:
    """
    Out-of-date translations of a group, keyed by locale.

    A child is out of date when the parent's revision marker is newer than the
    revision the child was produced from. Locales with a job in progress are
    left out: a retranslation underway is not also reported as stale.

    Args:
        group: The translation group.
        active_locales: Locales with an in-progress vendor job.

    Returns:
        Dict[str, StalenessRecord]: At most one record per locale, naming the stale child.

    Raises:
        IncomparableRevisionError: The parent and a child carry markers of
            types that cannot be ordered, e.g. a number and a string.
    """
    staleness: Dict[str, StalenessRecord] = {}
    for locale, child in group.children.items():
        if locale in active_locales:
            continue
        try:
            stale = is_newer(group.parent.revision_marker, child.produced_from)
        except TypeError:
            raise IncomparableRevisionError(
                f"Revision of '{child.id}' ({child.produced_from!r}) cannot be compared with "
                f"revision {group.parent.revision_marker!r} of its parent '{group.parent.id}'.",
                details={"parent": group.parent.id, "item": child.id, "locale": locale}
            ) from None
        if stale:
            staleness[locale] = StalenessRecord(locale=locale, item=child)

    if staleness:
        logger.debug("Group '%s' has out-of-date translations: %s", group.key, sorted(staleness))
    return staleness


def has_outstanding_staleness(group: TranslationGroup, staleness: Dict[str, StalenessRecord]) -> bool:
    """Whether the parent has any stale child, the group-level fact behind "update all"."""
    return any(record.item.id != group.parent.id for record in staleness.values())
