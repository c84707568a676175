"""Unit tests for per-locale and per-row translation states."""
from itertools import combinations

import pytest

from translation_sync.errors import ItemNotFoundError
from translation_sync.job_ledger import JobLedger
from translation_sync.models import LocaleStatus, RowStatus
from translation_sync.staleness import compute_staleness
from translation_sync.status_engine import TranslationStatusEngine, locale_state, row_state


def _states(repository, active=()):
    group = repository.resolve_group("p")
    active = set(active)
    return group, active, compute_staleness(group, active)


class TestLocaleState:

    def test_stale_child_viewed_from_its_own_row(self, repository):
        group, active, staleness = _states(repository)
        state = locale_state(group, active, staleness, "c-fr", "fr")

        assert state.status is LocaleStatus.OUT_OF_DATE
        assert state.target.id == "c-fr"
        assert state.is_self is True

    def test_stale_child_viewed_from_a_sibling(self, repository):
        group, active, staleness = _states(repository)
        state = locale_state(group, active, staleness, "c-de", "fr")

        assert state.status is LocaleStatus.OUT_OF_DATE
        assert state.is_self is False

    def test_parent_row_marks_every_column_as_self(self, repository):
        group, active, staleness = _states(repository)
        assert locale_state(group, active, staleness, "p", "fr").is_self is True
        assert locale_state(group, active, staleness, "p", "de").is_self is True

    def test_up_to_date_child(self, repository):
        group, active, staleness = _states(repository)

        own = locale_state(group, active, staleness, "c-de", "de")
        other = locale_state(group, active, staleness, "c-fr", "de")

        assert own.status is LocaleStatus.TRANSLATED
        assert own.target.id == "c-de"
        assert own.is_self is True
        assert other.status is LocaleStatus.TRANSLATED
        assert other.is_self is False

    def test_locale_without_translation(self, repository):
        group, active, staleness = _states(repository)
        state = locale_state(group, active, staleness, "p", "es")

        assert state.status is LocaleStatus.NONE
        assert state.target is None

    def test_in_progress_masks_staleness(self, repository):
        group = repository.resolve_group("p")
        # Staleness computed without the job still loses to the job.
        staleness = compute_staleness(group, set())
        state = locale_state(group, {"fr"}, staleness, "c-fr", "fr")
        assert state.status is LocaleStatus.IN_PROGRESS

    @pytest.mark.parametrize("viewer", ["p", "c-fr", "c-de"])
    def test_every_active_locale_is_in_progress(self, repository, viewer):
        locales = ["fr", "de", "es", "en"]
        for size in range(len(locales) + 1):
            for active in combinations(locales, size):
                group, active_set, staleness = _states(repository, active)
                for locale in locales:
                    state = locale_state(group, active_set, staleness, viewer, locale)
                    if locale in active_set:
                        assert state.status is LocaleStatus.IN_PROGRESS
                    elif locale in staleness:
                        assert state.status is LocaleStatus.OUT_OF_DATE
                    elif locale in group.children:
                        assert state.status is LocaleStatus.TRANSLATED
                    else:
                        assert state.status is LocaleStatus.NONE


class TestRowState:

    def test_stale_child_gets_a_single_update(self, repository):
        group, active, staleness = _states(repository)
        state = row_state(group, active, staleness, "c-fr")

        assert state.status is RowStatus.UPDATE_SINGLE
        assert state.source_id == "p"
        assert state.source_locale == "en"
        assert state.target_locale == "fr"
        assert state.project_options_id == "opt-1"

    def test_parent_with_stale_children_gets_update_all(self, repository):
        group, active, staleness = _states(repository)
        state = row_state(group, active, staleness, "p")

        assert state.status is RowStatus.UPDATE_ALL
        assert state.source_id == "p"
        assert state.source_locale == "en"
        assert state.target_locale is None

    def test_current_child(self, repository):
        group, active, staleness = _states(repository)
        assert row_state(group, active, staleness, "c-de").status is RowStatus.UP_TO_DATE_CHILD

    def test_current_parent(self, repository):
        group, active, staleness = _states(repository)
        staleness.clear()
        assert row_state(group, active, staleness, "p").status is RowStatus.UP_TO_DATE_PARENT

    def test_parent_is_busy_while_any_locale_is_active(self, repository):
        group, active, staleness = _states(repository, {"fr"})
        assert row_state(group, active, staleness, "p").status is RowStatus.BUSY

    def test_child_is_busy_when_its_own_locale_is_active(self, repository):
        group, active, staleness = _states(repository, {"de"})
        assert row_state(group, active, staleness, "c-de").status is RowStatus.BUSY

    def test_child_is_not_busy_for_a_sibling_job(self, repository):
        group, active, staleness = _states(repository, {"de"})
        assert row_state(group, active, staleness, "c-fr").status is RowStatus.UPDATE_SINGLE

    def test_whole_group_job_only_blocks_the_parent(self, repository):
        group, active, staleness = _states(repository, {"en"})
        assert row_state(group, active, staleness, "p").status is RowStatus.BUSY
        assert row_state(group, active, staleness, "c-de").status is RowStatus.UP_TO_DATE_CHILD

    def test_solitary_item_has_nothing_to_offer(self, repository):
        group = repository.resolve_group("solo")
        assert row_state(group, set(), {}, "solo").status is RowStatus.NOT_APPLICABLE
        assert row_state(group, {"fr"}, {}, "solo").status is RowStatus.BUSY

    def test_viewer_outside_the_group(self, repository):
        group, active, staleness = _states(repository)
        with pytest.raises(ItemNotFoundError):
            row_state(group, active, staleness, "solo")

    def test_update_parameters(self, repository):
        group, active, staleness = _states(repository)

        single = row_state(group, active, staleness, "c-fr").to_query_params(redirect_to="edit.php")
        update_all = row_state(group, active, staleness, "p").to_query_params()
        current = row_state(group, active, staleness, "c-de").to_query_params()

        assert single == {
            "page": "managedtranslation",
            "action": "sdl_update_single",
            "src_id": "p",
            "src_lang": "en",
            "target_lang": "fr",
            "project_options": "opt-1",
            "redirect_to": "edit.php",
        }
        assert update_all == {
            "page": "managedtranslation",
            "action": "sdl_update_all",
            "src_id": "p",
            "src_lang": "en",
        }
        assert current == {}


class TestTranslationStatusEngine:

    def test_queries_go_through_the_collaborators(self, repository, ledger):
        engine = TranslationStatusEngine(repository, ledger)

        assert engine.locale_state("c-fr", "fr").status is LocaleStatus.OUT_OF_DATE
        assert engine.row_state("c-fr").status is RowStatus.UPDATE_SINGLE

        ledger.record_submission("p", "fr")

        assert engine.locale_state("c-fr", "fr").status is LocaleStatus.IN_PROGRESS
        assert engine.row_state("p").status is RowStatus.BUSY

    def test_unknown_item(self, repository, ledger):
        engine = TranslationStatusEngine(repository, ledger)
        with pytest.raises(ItemNotFoundError):
            engine.row_state("missing")

    def test_status_grid(self, repository):
        engine = TranslationStatusEngine(repository, JobLedger())
        grid = engine.status_grid(["p", "c-fr", "c-de", "solo"], ["fr", "de"])

        assert list(grid) == ["p", "c-fr", "c-de", "solo"]
        assert grid["p"].row.status is RowStatus.UPDATE_ALL
        assert grid["c-fr"].row.status is RowStatus.UPDATE_SINGLE
        assert grid["c-de"].columns["fr"].status is LocaleStatus.OUT_OF_DATE
        assert grid["c-de"].columns["de"].is_self is True
        assert grid["solo"].row.status is RowStatus.NOT_APPLICABLE
        assert grid["solo"].columns["fr"].status is LocaleStatus.NONE

    def test_status_grid_resolves_each_group_once(self, repository, ledger):
        class CountingResolver:
            def __init__(self):
                self.calls = 0

            def resolve_group(self, item_id):
                self.calls += 1
                return repository.resolve_group(item_id)

        resolver = CountingResolver()
        TranslationStatusEngine(resolver, ledger).status_grid(["p", "c-fr", "c-de"], ["fr"])
        assert resolver.calls == 1
