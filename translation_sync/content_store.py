"""
Translation group resolution over a snapshot of host platform content.

The host platform owns items and the links between translations; this module
holds a read view of them and rebuilds the parent/children group of any item.
"""
import logging
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml

from translation_sync.errors import ItemNotFoundError, NoGroupError
from translation_sync.job_ledger import JobLedger
from translation_sync.models import ContentItem, JobRecord, JobStatus, TranslationGroup

logger = logging.getLogger(__name__)


class ContentRepository:
    """In-memory view of content items and their translation links."""

    def __init__(self, items: Optional[Iterable[ContentItem]] = None):
        self._items: Dict[Any, ContentItem] = {}
        # parent id -> {locale: child id}
        self._translations: Dict[Any, Dict[str, Any]] = {}
        # any member id (parent included) -> parent id
        self._parent_of: Dict[Any, Any] = {}
        for item in items or ():
            self.add_item(item)

    def add_item(self, item: ContentItem) -> None:
        self._items[item.id] = item

    def get_item(self, item_id: Any) -> ContentItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise ItemNotFoundError(f"Content item '{item_id}' does not exist.", details={"id": item_id}) from None

    def link_translations(self, parent_id: Any, children: Dict[str, Any]) -> None:
        """
        Record `parent_id` as the source of truth for a group of translations.

        Args:
            parent_id: Id of the source item.
            children: Mapping of locale to the id of the translation in that locale.

        A locale linked again to a different item drops the previous translation
        from the group; it then resolves as a group of one.

        Raises:
            ItemNotFoundError: The parent or a child does not exist.
            ValueError: A child is in the wrong locale, or an item would belong
                to two groups or be both a parent and a translation.
        """
        parent = self.get_item(parent_id)
        owner = self._parent_of.get(parent_id)
        if owner is not None and owner != parent_id:
            raise ValueError(f"Item '{parent_id}' is a translation in the group of '{owner}'; it cannot be a parent.")
        for locale, child_id in children.items():
            child = self.get_item(child_id)
            if child.locale != locale:
                raise ValueError(f"Item '{child_id}' is in '{child.locale}', not '{locale}'.")
            if locale == parent.locale:
                raise ValueError(f"Item '{child_id}' cannot translate '{parent_id}' into its own locale.")
            if child_id in self._translations:
                raise ValueError(f"Item '{child_id}' is the parent of its own group; it cannot be a translation.")
            other_parent = self._parent_of.get(child_id)
            if other_parent is not None and other_parent != parent_id:
                raise ValueError(f"Item '{child_id}' already belongs to the group of '{other_parent}'.")

        group = self._translations.setdefault(parent_id, {})
        for locale, child_id in children.items():
            replaced = group.get(locale)
            if replaced is not None and replaced != child_id:
                # The replaced translation leaves the group and stands alone.
                del self._parent_of[replaced]
                logger.info("Item '%s' replaces '%s' as the '%s' translation of '%s'.",
                            child_id, replaced, locale, parent_id)
            group[locale] = child_id
            self._parent_of[child_id] = parent_id
        self._parent_of[parent_id] = parent_id

    def linked_group(self, item_id: Any) -> TranslationGroup:
        """
        The translation group `item_id` takes part in.

        Raises:
            ItemNotFoundError: The item does not exist.
            NoGroupError: The item has no translation relationship.
        """
        self.get_item(item_id)
        parent_id = self._parent_of.get(item_id)
        if parent_id is None:
            raise NoGroupError(f"Content item '{item_id}' has no translations.", details={"id": item_id})
        children = {
            locale: self.get_item(child_id)
            for locale, child_id in self._translations.get(parent_id, {}).items()
        }
        return TranslationGroup(parent=self.get_item(parent_id), children=children)

    def resolve_group(self, item_id: Any) -> TranslationGroup:
        """
        The translation group of `item_id`; a solitary item is a group of one.

        Raises:
            ItemNotFoundError: The item does not exist.
        """
        try:
            return self.linked_group(item_id)
        except NoGroupError:
            logger.debug("Item '%s' has no translation group; treating it as its own parent.", item_id)
            return TranslationGroup(parent=self.get_item(item_id))


def _item_from_dict(data: Dict[str, Any]) -> ContentItem:
    project_options_id = data.get("project_options_id")
    return ContentItem(
        id=str(data["id"]),
        locale=str(data["locale"]).lower(),
        revision_marker=data.get("revision"),
        project_options_id=str(project_options_id) if project_options_id is not None else None,
        source_revision=data.get("source_revision"),
    )


def build_from_snapshot(data: Dict[str, Any]) -> Tuple[ContentRepository, JobLedger]:
    """
    Build the repository and the job ledger from a snapshot mapping.

    Expected keys: `items` (id, locale, revision, optional project_options_id
    and source_revision), `groups` (parent plus a locale -> id `translations`
    mapping) and `jobs` (group, locale, optional status). Ids become strings.
    """
    repository = ContentRepository(_item_from_dict(entry) for entry in data.get("items") or [])
    for entry in data.get("groups") or []:
        translations = {str(locale).lower(): str(child_id) for locale, child_id in (entry.get("translations") or {}).items()}
        repository.link_translations(str(entry["parent"]), translations)

    ledger = JobLedger()
    for entry in data.get("jobs") or []:
        ledger.add(JobRecord(
            group_key=str(entry["group"]),
            target_locale=str(entry["locale"]).lower(),
            status=JobStatus(entry.get("status", JobStatus.IN_PROGRESS.value)),
        ))
    return repository, ledger


def load_snapshot(snapshot_path: str) -> Tuple[ContentRepository, JobLedger]:
    """Read a YAML snapshot file; see build_from_snapshot for its layout."""
    with open(snapshot_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot '{snapshot_path}' must contain a YAML mapping.")
    repository, ledger = build_from_snapshot(data)
    logger.info("Loaded snapshot '%s'.", snapshot_path)
    return repository, ledger
