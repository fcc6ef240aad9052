"""
Message catalogs for errors, notifications and emails.

Catalogs are JSON files under apps/core/locale/, one per language, with
nested keys ("bookings.notFound"). Lookups fall back to English and
then to the key itself, so a missing translation never breaks a request.
"""
import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from django.conf import settings
from django.utils import translation

logger = logging.getLogger(__name__)

LOCALE_DIR = Path(__file__).resolve().parent / "locale"
SUPPORTED_LOCALES = ("en", "fr", "ar", "de")
FALLBACK_LOCALE = "en"


def default_locale() -> str:
    return normalize_locale(settings.LANGUAGE_CODE, fallback=FALLBACK_LOCALE)


def normalize_locale(locale: Optional[str], fallback: Optional[str] = None) -> str:
    """Reduce 'fr-FR' / 'AR' to a supported two-letter code."""
    if locale:
        code = locale.replace("_", "-").split("-")[0].lower()
        if code in SUPPORTED_LOCALES:
            return code
    return fallback or default_locale()


@lru_cache(maxsize=None)
def load_catalog(locale: str) -> dict:
    path = LOCALE_DIR / f"{locale}.json"
    try:
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        logger.warning(f"No message catalog for locale '{locale}'")
        return {}


def _lookup(catalog: dict, key: str) -> Optional[str]:
    node = catalog
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return None
        node = node[part]
    return node if isinstance(node, str) else None


class _KeepMissing(dict):
    def __missing__(self, key):
        return "{" + key + "}"


def translate(key: str, locale: Optional[str] = None, **params) -> str:
    locale = normalize_locale(locale)
    template = _lookup(load_catalog(locale), key)
    if template is None and locale != FALLBACK_LOCALE:
        template = _lookup(load_catalog(FALLBACK_LOCALE), key)
    if template is None:
        return key
    return template.format_map(_KeepMissing(params))


def resolve_locale(request) -> str:
    """
    Locale for a request: the user's saved preference when authenticated,
    otherwise the language cookie / Accept-Language header.
    """
    user = getattr(request, "user", None)
    if user is not None and user.is_authenticated:
        preferred = getattr(user, "preferred_language", None)
        if preferred:
            return normalize_locale(preferred)
    return normalize_locale(translation.get_language_from_request(request))
