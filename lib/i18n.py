# =============================================================================
# lib/i18n.py - Bilingual Messages
# =============================================================================
# The community app ships in English and Greek. Messages are carried as
# LocalizedMessage pairs and rendered with a Locale that the caller passes
# in explicitly (per request), never from process-wide state.
#
# Usage:
#   from lib.i18n import Locale, LocalizedMessage
#   label = LocalizedMessage(en="Same city", el="Ίδια πόλη")
#   label.render(Locale.EL)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Locale(str, Enum):
    """Supported UI languages."""
    EN = "en"
    EL = "el"

    @classmethod
    def parse(cls, value: str | None) -> Locale | None:
        """Parse a language tag like "el", "el-GR" or "EN"; None if unsupported."""
        if not value:
            return None
        primary = value.strip().split("-")[0].split("_")[0].lower()
        try:
            return cls(primary)
        except ValueError:
            return None


@dataclass(frozen=True)
class LocalizedMessage:
    """A message in every supported language."""
    en: str
    el: str

    def render(self, locale: Locale) -> str:
        if locale is Locale.EL:
            return self.el or self.en
        return self.en


def resolve_locale(
    explicit: str | None,
    accept_language: str | None,
    default: Locale = Locale.EN,
) -> Locale:
    """
    Pick the locale for one request.

    Order: explicit ?lang= value, then the Accept-Language header entries
    (highest q first), then the configured default.
    """
    locale = Locale.parse(explicit)
    if locale:
        return locale

    if accept_language:
        weighted: list[tuple[float, int, str]] = []
        for index, part in enumerate(accept_language.split(",")):
            tag, _, params = part.strip().partition(";")
            quality = 1.0
            if params.strip().startswith("q="):
                try:
                    quality = float(params.strip()[2:])
                except ValueError:
                    quality = 0.0
            weighted.append((-quality, index, tag))

        for _, _, tag in sorted(weighted):
            locale = Locale.parse(tag)
            if locale:
                return locale

    return default
