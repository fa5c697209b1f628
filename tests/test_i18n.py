"""Tests for the i18n package."""

import pytest

from i18n import _, card_type_name, get_available_locales, get_locale, phase_name, set_locale, t
from i18n.en_US import STRINGS as EN
from i18n.zh_CN import STRINGS as ZH


class TestTranslate:
    def setup_method(self):
        set_locale("en_US")

    def teardown_method(self):
        set_locale("en_US")

    def test_format_arguments(self):
        assert t("error.GAME_FULL", max_players=4) == "Game is already full (4 players)"

    def test_alias(self):
        assert _("phase.skirmish") == t("phase.skirmish")

    def test_switch_locale(self):
        set_locale("zh_CN")
        assert get_locale() == "zh_CN"
        assert t("phase.skirmish") == "交锋"

    def test_fallback_to_english(self):
        set_locale("zh_CN")
        assert t("demo.turn_limit", count=5) == EN["demo.turn_limit"].format(count=5)

    def test_missing_key(self):
        assert t("no.such.key") == "[no.such.key]"

    def test_missing_format_argument_returns_template(self):
        assert t("error.GAME_FULL") == EN["error.GAME_FULL"]

    def test_unsupported_locale(self):
        with pytest.raises(ValueError):
            set_locale("xx_XX")
        assert get_locale() == "en_US"

    def test_available_locales(self):
        assert get_available_locales() == ["en_US", "zh_CN"]


class TestDomainHelpers:
    def setup_method(self):
        set_locale("en_US")

    def test_phase_name(self):
        assert phase_name("handbuilding") == "Handbuilding"

    def test_unknown_phase_returns_value(self):
        assert phase_name("intermission") == "intermission"

    def test_card_type_name(self):
        assert card_type_name("Divine Gift") == "Divine Gift"


class TestTables:
    def test_every_error_code_has_text(self):
        from skirmish.errors import ErrorCode
        for code in ErrorCode:
            assert f"error.{code.value}" in EN
            assert f"error.{code.value}" in ZH

    def test_every_event_type_has_text(self):
        from skirmish.events import EventType
        for event_type in EventType:
            assert f"event.{event_type.value}" in EN

    def test_tables_have_the_same_keys(self):
        assert set(ZH) == set(EN)
