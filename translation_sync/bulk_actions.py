"""
Bulk translation actions on content listings.

The same offerability rule drives both the menu (build_bulk_actions) and the
dispatcher (parse_action): a target locale must be configured for the active
project options and its primary subtag must be enabled on the host platform.
"""
import logging
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Sequence

from translation_sync.errors import NotOursError, UnsupportedLocaleError
from translation_sync.models import DispatchMode, DispatchRequest, LocalePairing

logger = logging.getLogger(__name__)

ACTION_PREFIX = "sdl_translate_"
FULL_PROJECT_SUFFIX = "full"

CREATE_PROJECT_LABEL = "Create translation project"
QUICK_TRANSLATE_LABEL = "Quick translate into {language}"


def primary_subtag(locale: str) -> str:
    """'de-DE' -> 'de'."""
    return locale.split("-")[0].lower()


def is_offerable(locale: str, pairing: LocalePairing, host_locales: Iterable[str]) -> bool:
    enabled = {host_locale.lower() for host_locale in host_locales}
    return locale in pairing.targets and primary_subtag(locale) in enabled


def offerable_locales(pairing: LocalePairing, host_locales: Iterable[str]) -> List[str]:
    """Configured targets the host platform can receive, in configuration order."""
    host_locales = list(host_locales)
    return [locale for locale in pairing.targets if is_offerable(locale, pairing, host_locales)]


def build_bulk_actions(pairing: LocalePairing, host_locales: Sequence[str]) -> Dict[str, str]:
    """
    Bulk action tokens and labels to add to a content listing.

    An empty host locale set offers nothing: translations would have nowhere to land.
    """
    if not host_locales:
        logger.warning("No languages are set up on the host platform; translation actions are disabled.")
        return OrderedDict()

    actions = OrderedDict()
    actions[ACTION_PREFIX + FULL_PROJECT_SUFFIX] = CREATE_PROJECT_LABEL
    for locale in offerable_locales(pairing, host_locales):
        actions[ACTION_PREFIX + locale] = QUICK_TRANSLATE_LABEL.format(language=primary_subtag(locale).upper())
    return actions


def parse_action(action_token: str, selected_item_ids: Sequence[Any], pairing: LocalePairing,
                 host_locales: Iterable[str], project_options_id: Optional[str] = None) -> DispatchRequest:
    """
    Turn a bulk action token into a dispatch request.

    Args:
        action_token: e.g. 'sdl_translate_full' or 'sdl_translate_de-DE'.
        selected_item_ids: Ids of the selected items, in listing order.
        pairing: Source and target locales of the active project options.
        host_locales: Locale slugs enabled on the host platform.
        project_options_id: Active project options, passed on for quick submission.

    Raises:
        NotOursError: The token does not start with the translation prefix.
        UnsupportedLocaleError: The target locale is not configured or not enabled.
        EmptySelectionError: No items were selected.
    """
    if not action_token or not action_token.startswith(ACTION_PREFIX):
        raise NotOursError(f"Bulk action '{action_token}' is not a translation action.")

    suffix = action_token[len(ACTION_PREFIX):]
    item_ids = tuple(selected_item_ids)

    if suffix == FULL_PROJECT_SUFFIX:
        return DispatchRequest(mode=DispatchMode.CREATE_PROJECT, item_ids=item_ids)

    if not is_offerable(suffix, pairing, host_locales):
        logger.warning("Rejected quick translation into '%s': not an enabled target of the active pairing.", suffix)
        raise UnsupportedLocaleError(
            f"Quick translation into '{suffix}' is not available.",
            details={"locale": suffix, "targets": list(pairing.targets)}
        )

    return DispatchRequest(
        mode=DispatchMode.QUICK_TRANSLATE,
        item_ids=item_ids,
        target_locale=suffix,
        source_locale=pairing.source or None,
        project_options_id=project_options_id,
    )
