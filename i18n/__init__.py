"""Lightweight i18n with no external dependencies.

Usage::

    from i18n import t, set_locale

    set_locale("zh_CN")
    print(t("error.GAME_FULL", max_players=4))

    # domain helpers
    from i18n import phase_name, card_type_name
    print(phase_name("skirmish"))      # → "Skirmish" / "交锋"
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en_US"

_locale: str = DEFAULT_LOCALE
_tables: dict[str, dict[str, str]] = {}


def _load_table(locale: str) -> dict[str, str]:
    """Load a translation table on first use."""
    if locale == "en_US":
        from .en_US import STRINGS
    elif locale == "zh_CN":
        from .zh_CN import STRINGS
    else:
        raise ValueError(f"Unsupported locale: {locale}")
    return STRINGS


def set_locale(locale: str) -> None:
    """Switch the current language."""
    global _locale
    # load now so an unknown locale fails here
    if locale not in _tables:
        _tables[locale] = _load_table(locale)
    _locale = locale


def get_locale() -> str:
    return _locale


def get_available_locales() -> list[str]:
    return ["en_US", "zh_CN"]


def t(key: str, **kwargs: object) -> str:
    """Translate ``key``.

    Looks the key up in the current locale and formats it with ``kwargs``.
    Missing keys fall back to en_US, then to ``[key]``.

    Args:
        key: translation key, e.g. ``"error.GAME_FULL"``
        **kwargs: format arguments, e.g. ``max_players=4``
    """
    if _locale not in _tables:
        _tables[_locale] = _load_table(_locale)

    template = _tables[_locale].get(key)

    if template is None and _locale != DEFAULT_LOCALE:
        if DEFAULT_LOCALE not in _tables:
            _tables[DEFAULT_LOCALE] = _load_table(DEFAULT_LOCALE)
        template = _tables[DEFAULT_LOCALE].get(key)
        if template is not None:
            logger.debug("i18n fallback: '%s' not in %s, using %s", key, _locale, DEFAULT_LOCALE)

    if template is None:
        logger.warning("i18n missing key: '%s' (lang=%s)", key, _locale)
        return f"[{key}]"

    if kwargs:
        try:
            return template.format_map(kwargs)
        except KeyError as e:
            logger.warning("i18n format error: key='%s', missing=%s", key, e)
            return template
    return template


# ── alias ──
_ = t


# ── domain helpers ──


def _is_missing(key: str, result: str) -> bool:
    return result == f"[{key}]"


def phase_name(value: str) -> str:
    """Display name of a game phase value such as ``"handbuilding"``."""
    key = f"phase.{value}"
    result = t(key)
    return result if not _is_missing(key, result) else value


def card_type_name(value: str) -> str:
    """Display name of a card type value such as ``"Divine Gift"``."""
    key = f"card_type.{value}"
    result = t(key)
    return result if not _is_missing(key, result) else value
