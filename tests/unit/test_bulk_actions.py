import unittest

from translation_sync.bulk_actions import (
    build_bulk_actions,
    offerable_locales,
    parse_action,
    primary_subtag,
)
from translation_sync.errors import EmptySelectionError, NotOursError, UnsupportedLocaleError
from translation_sync.models import DispatchMode, LocalePairing

PAIRING = LocalePairing(source="en-US", targets=("de-DE", "fr-FR", "es-ES"))


class TestParseAction(unittest.TestCase):

    def test_quick_translate(self):
        request = parse_action("sdl_translate_de-DE", ["12"], PAIRING, ["en", "de"], project_options_id="opt-1")

        self.assertEqual(request.mode, DispatchMode.QUICK_TRANSLATE)
        self.assertEqual(request.target_locale, "de-DE")
        self.assertEqual(request.item_ids, ("12",))
        self.assertEqual(request.source_locale, "en-US")
        self.assertEqual(request.project_options_id, "opt-1")

    def test_quick_translate_needs_the_host_locale(self):
        with self.assertRaises(UnsupportedLocaleError) as ctx:
            parse_action("sdl_translate_de-DE", ["12"], PAIRING, ["en", "fr"])
        self.assertEqual(ctx.exception.details["locale"], "de-DE")

    def test_quick_translate_needs_a_configured_target(self):
        with self.assertRaises(UnsupportedLocaleError):
            parse_action("sdl_translate_it-IT", ["12"], PAIRING, ["en", "it"])

    def test_full_project_keeps_the_selection(self):
        request = parse_action("sdl_translate_full", [3, 1, 2], PAIRING, ["en"])

        self.assertEqual(request.mode, DispatchMode.CREATE_PROJECT)
        self.assertEqual(request.item_ids, (3, 1, 2))
        self.assertIsNone(request.target_locale)

    def test_foreign_action_is_not_ours(self):
        for token in ("trash", "edit", "", "translate_de-DE", "xsdl_translate_full"):
            with self.assertRaises(NotOursError):
                parse_action(token, ["1"], PAIRING, ["de"])

    def test_empty_selection(self):
        with self.assertRaises(EmptySelectionError):
            parse_action("sdl_translate_full", [], PAIRING, ["en"])

    def test_host_locales_are_compared_case_insensitively(self):
        request = parse_action("sdl_translate_fr-FR", ["1"], PAIRING, ["FR"])
        self.assertEqual(request.target_locale, "fr-FR")


class TestRoutingParameters(unittest.TestCase):

    def test_create_project(self):
        request = parse_action("sdl_translate_full", [4, 8, 15], PAIRING, ["en"])
        self.assertEqual(
            request.to_query_params(),
            {"page": "managedtranslation", "tab": "create_project", "posts": "4,8,15"}
        )

    def test_quick_translate(self):
        request = parse_action("sdl_translate_fr-FR", [4, 8], PAIRING, ["fr"], project_options_id="opt-1")
        self.assertEqual(
            request.to_query_params(redirect_to="edit.php"),
            {
                "page": "managedtranslation",
                "action": "sdl_create_project_quick",
                "id": "4,8",
                "TargetLang": "fr-FR",
                "SrcLang": "en-US",
                "ProjectOptionsID": "opt-1",
                "redirect_to": "edit.php",
            }
        )


class TestBulkActionMenu(unittest.TestCase):

    def test_menu_lists_offerable_targets(self):
        actions = build_bulk_actions(PAIRING, ["en", "de", "fr"])
        self.assertEqual(list(actions.items()), [
            ("sdl_translate_full", "Create translation project"),
            ("sdl_translate_de-DE", "Quick translate into DE"),
            ("sdl_translate_fr-FR", "Quick translate into FR"),
        ])

    def test_menu_and_dispatcher_agree(self):
        host_locales = ["en", "fr", "es"]
        for token in build_bulk_actions(PAIRING, host_locales):
            request = parse_action(token, ["1"], PAIRING, host_locales)
            self.assertIsNotNone(request)
        with self.assertRaises(UnsupportedLocaleError):
            parse_action("sdl_translate_de-DE", ["1"], PAIRING, host_locales)

    def test_no_host_languages_means_no_actions(self):
        with self.assertLogs("translation_sync.bulk_actions", level="WARNING"):
            self.assertEqual(dict(build_bulk_actions(PAIRING, [])), {})

    def test_offerable_locales_keep_configuration_order(self):
        self.assertEqual(offerable_locales(PAIRING, ["es", "de"]), ["de-DE", "es-ES"])

    def test_primary_subtag(self):
        self.assertEqual(primary_subtag("de-DE"), "de")
        self.assertEqual(primary_subtag("pt-BR-x-custom"), "pt")
        self.assertEqual(primary_subtag("FR"), "fr")


if __name__ == '__main__':
    unittest.main()
