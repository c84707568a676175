"""Data model shared by the status engine, the dispatch router and the interchange codec."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from translation_sync.errors import EmptySelectionError

# Admin page slug that receives every routing decision.
ADMIN_PAGE = "managedtranslation"


@dataclass(frozen=True)
class ContentItem:
    """One localized unit of content as seen by the host platform."""
    id: Any
    locale: str
    revision_marker: Any
    project_options_id: Optional[str] = None
    # Parent revision this translation was produced from, when the platform recorded it.
    source_revision: Any = None

    @property
    def produced_from(self) -> Any:
        """The marker staleness is measured against."""
        if self.source_revision is not None:
            return self.source_revision
        return self.revision_marker


@dataclass
class TranslationGroup:
    """A parent item plus at most one translated child per locale."""
    parent: ContentItem
    children: Dict[str, ContentItem] = field(default_factory=dict)

    def __post_init__(self):
        for locale, child in self.children.items():
            if locale == self.parent.locale:
                raise ValueError(
                    f"Child '{child.id}' uses the parent locale '{locale}'; a group has exactly one item per locale."
                )
            if child.locale != locale:
                raise ValueError(f"Child '{child.id}' has locale '{child.locale}' but is filed under '{locale}'.")

    @property
    def key(self) -> Any:
        return self.parent.id

    def members(self) -> Iterator[ContentItem]:
        yield self.parent
        yield from self.children.values()

    def find(self, item_id: Any) -> Optional[ContentItem]:
        for item in self.members():
            if item.id == item_id:
                return item
        return None

    def is_parent(self, item_id: Any) -> bool:
        return self.parent.id == item_id


class JobStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class JobRecord:
    """An in-flight (or finished) vendor submission for one target locale of a group."""
    group_key: Any
    target_locale: str
    status: JobStatus = JobStatus.IN_PROGRESS


@dataclass(frozen=True)
class StalenessRecord:
    locale: str
    item: ContentItem


class LocaleStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    OUT_OF_DATE = "out_of_date"
    TRANSLATED = "translated"
    NONE = "none"


@dataclass(frozen=True)
class LocaleState:
    """State of one locale column for one viewed item."""
    status: LocaleStatus
    target: Optional[ContentItem] = None
    # True when the column refers to the row being looked at (or the viewer is the parent).
    is_self: bool = False


class RowStatus(str, Enum):
    BUSY = "busy"
    UPDATE_SINGLE = "update_single"
    UPDATE_ALL = "update_all"
    UP_TO_DATE_CHILD = "up_to_date_child"
    UP_TO_DATE_PARENT = "up_to_date_parent"
    NOT_APPLICABLE = "not_applicable"


_ROW_ACTIONS = {
    RowStatus.UPDATE_SINGLE: "sdl_update_single",
    RowStatus.UPDATE_ALL: "sdl_update_all",
}


@dataclass(frozen=True)
class RowState:
    """Overall translation state of one row, with the parameters its action needs."""
    status: RowStatus
    source_id: Any = None
    source_locale: Optional[str] = None
    target_locale: Optional[str] = None
    project_options_id: Optional[str] = None

    @property
    def actionable(self) -> bool:
        return self.status in _ROW_ACTIONS

    def to_query_params(self, redirect_to: Optional[str] = None) -> Dict[str, str]:
        """Routing parameters for an update action; empty for states that offer none."""
        if not self.actionable:
            return {}
        params = {
            "page": ADMIN_PAGE,
            "action": _ROW_ACTIONS[self.status],
            "src_id": str(self.source_id),
            "src_lang": self.source_locale,
        }
        if self.status is RowStatus.UPDATE_SINGLE:
            params["target_lang"] = self.target_locale
            if self.project_options_id is not None:
                params["project_options"] = self.project_options_id
        if redirect_to:
            params["redirect_to"] = redirect_to
        return params


class DispatchMode(str, Enum):
    CREATE_PROJECT = "create_project"
    QUICK_TRANSLATE = "quick_translate"


@dataclass(frozen=True)
class DispatchRequest:
    """A parsed bulk action: open the project form, or submit straight to the vendor."""
    mode: DispatchMode
    item_ids: Tuple[Any, ...]
    target_locale: Optional[str] = None
    source_locale: Optional[str] = None
    project_options_id: Optional[str] = None

    def __post_init__(self):
        if not self.item_ids:
            raise EmptySelectionError("A bulk translation action needs at least one selected item.")
        if self.mode is DispatchMode.QUICK_TRANSLATE and not self.target_locale:
            raise ValueError("Quick translation requires a target locale.")

    @property
    def joined_ids(self) -> str:
        return ",".join(str(item_id) for item_id in self.item_ids)

    def to_query_params(self, redirect_to: Optional[str] = None) -> Dict[str, str]:
        if self.mode is DispatchMode.CREATE_PROJECT:
            return {"page": ADMIN_PAGE, "tab": "create_project", "posts": self.joined_ids}

        params = {
            "page": ADMIN_PAGE,
            "action": "sdl_create_project_quick",
            "id": self.joined_ids,
            "TargetLang": self.target_locale,
        }
        if self.source_locale:
            params["SrcLang"] = self.source_locale
        if self.project_options_id:
            params["ProjectOptionsID"] = self.project_options_id
        if redirect_to:
            params["redirect_to"] = redirect_to
        return params


@dataclass(frozen=True)
class LocalePairing:
    """Source locale and offerable target locales of one vendor project options set."""
    source: str
    targets: Tuple[str, ...] = ()


@dataclass
class StructuredContent:
    """
    Translated fields carried by one interchange document.

    `body` is the flattened text of the target node: nested inline markup is
    not preserved.
    """
    source_locale: str
    target_locale: str
    title: Optional[str] = None
    body: Optional[str] = None
    taxonomy_terms: Dict[str, Dict[str, str]] = field(default_factory=dict)
    metadata: Dict[str, str] = field(default_factory=dict)

    def all_values(self) -> List[Tuple[str, str]]:
        """Every (field label, value) pair, in channel order."""
        values = []
        if self.title is not None:
            values.append(("title", self.title))
        if self.body is not None:
            values.append(("body", self.body))
        for taxonomy, terms in self.taxonomy_terms.items():
            for term_id, name in terms.items():
                values.append((f"taxonomy:{taxonomy}:{term_id}", name))
        for meta_key, value in self.metadata.items():
            values.append((f"meta:{meta_key}", value))
        return values

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_language": self.source_locale,
            "target_language": self.target_locale,
            "title": self.title,
            "body": self.body,
            "taxonomy": {taxonomy: dict(terms) for taxonomy, terms in self.taxonomy_terms.items()},
            "meta": dict(self.metadata),
        }
