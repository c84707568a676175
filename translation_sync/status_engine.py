"""
Translation status of content items.

The pure functions `locale_state` and `row_state` turn a group, its active
locales and its staleness into one fixed state per locale column and per
row. `TranslationStatusEngine` wires them to a group resolver and a job
ledger; it is built once per request and keeps no state between queries.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Set

from translation_sync.errors import ItemNotFoundError
from translation_sync.models import (
    ContentItem,
    LocaleState,
    LocaleStatus,
    RowState,
    RowStatus,
    StalenessRecord,
    TranslationGroup,
)
from translation_sync.staleness import compute_staleness, has_outstanding_staleness

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupStatus:
    """Everything the state functions need, taken from one group snapshot."""
    group: TranslationGroup
    active_locales: frozenset
    staleness: Dict[str, StalenessRecord]


@dataclass(frozen=True)
class ItemStatus:
    row: RowState
    columns: Dict[str, LocaleState]


def _viewer(group: TranslationGroup, viewer_id: Any) -> ContentItem:
    viewer = group.find(viewer_id)
    if viewer is None:
        raise ItemNotFoundError(
            f"Content item '{viewer_id}' is not part of the group of '{group.key}'.",
            details={"id": viewer_id, "group": group.key}
        )
    return viewer


def locale_state(group: TranslationGroup, active_locales: Set[str], staleness: Dict[str, StalenessRecord],
                 viewer_id: Any, locale: str) -> LocaleState:
    """
    State of one locale column for the row of `viewer_id`.

    Precedence: in progress, then out of date, then translated, then none.
    `is_self` marks a column that points at the viewed row, or any column when
    the viewer is the parent.
    """
    viewer_is_parent = group.is_parent(viewer_id)

    if locale in active_locales:
        return LocaleState(LocaleStatus.IN_PROGRESS)

    record = staleness.get(locale)
    if record is not None:
        return LocaleState(
            LocaleStatus.OUT_OF_DATE,
            target=record.item,
            is_self=record.item.id == viewer_id or viewer_is_parent,
        )

    child = group.children.get(locale)
    if child is not None:
        return LocaleState(
            LocaleStatus.TRANSLATED,
            target=child,
            is_self=child.id == viewer_id or viewer_is_parent,
        )

    return LocaleState(LocaleStatus.NONE)


def row_state(group: TranslationGroup, active_locales: Set[str], staleness: Dict[str, StalenessRecord],
              viewer_id: Any) -> RowState:
    """
    Overall state of the row of `viewer_id`.

    Busy masks staleness, and a stale viewer gets a single-locale update
    before the parent is offered an update of the whole group.

    Raises:
        ItemNotFoundError: `viewer_id` is not a member of the group.
    """
    viewer = _viewer(group, viewer_id)
    parent = group.parent
    viewer_is_parent = viewer.id == parent.id

    if not group.children and not active_locales:
        return RowState(RowStatus.NOT_APPLICABLE)

    if active_locales and (viewer_is_parent or viewer.locale in active_locales):
        return RowState(RowStatus.BUSY)

    if viewer.locale in staleness:
        return RowState(
            RowStatus.UPDATE_SINGLE,
            source_id=parent.id,
            source_locale=parent.locale,
            target_locale=viewer.locale,
            project_options_id=viewer.project_options_id,
        )

    if viewer_is_parent and has_outstanding_staleness(group, staleness):
        return RowState(RowStatus.UPDATE_ALL, source_id=parent.id, source_locale=parent.locale)

    if not viewer_is_parent:
        return RowState(RowStatus.UP_TO_DATE_CHILD)
    return RowState(RowStatus.UP_TO_DATE_PARENT)


class TranslationStatusEngine:
    """
    Answers status queries for content items.

    Args:
        resolver: Anything with `resolve_group(item_id) -> TranslationGroup`.
        ledger: Anything with `active_locales(group) -> set of locales`.
    """

    def __init__(self, resolver, ledger):
        self.resolver = resolver
        self.ledger = ledger

    def group_status(self, item_id: Any) -> GroupStatus:
        group = self.resolver.resolve_group(item_id)
        active = frozenset(self.ledger.active_locales(group))
        return GroupStatus(group=group, active_locales=active, staleness=compute_staleness(group, active))

    def locale_state(self, item_id: Any, locale: str) -> LocaleState:
        status = self.group_status(item_id)
        return locale_state(status.group, status.active_locales, status.staleness, item_id, locale)

    def row_state(self, item_id: Any) -> RowState:
        status = self.group_status(item_id)
        return row_state(status.group, status.active_locales, status.staleness, item_id)

    def status_grid(self, item_ids: Iterable[Any], locales: List[str]) -> Dict[Any, ItemStatus]:
        """
        Row and column states for a listing page.

        Each group is resolved once even when several of its members are listed.
        """
        by_group: Dict[Any, GroupStatus] = {}
        grid: Dict[Any, ItemStatus] = {}
        for item_id in item_ids:
            status = next((s for s in by_group.values() if s.group.find(item_id) is not None), None)
            if status is None:
                status = self.group_status(item_id)
                by_group[status.group.key] = status
            grid[item_id] = ItemStatus(
                row=row_state(status.group, status.active_locales, status.staleness, item_id),
                columns={
                    locale: locale_state(status.group, status.active_locales, status.staleness, item_id, locale)
                    for locale in locales
                },
            )
        logger.debug("Computed status for %d item(s) across %d group(s).", len(grid), len(by_group))
        return grid
