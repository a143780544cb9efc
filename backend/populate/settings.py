"""Engine inputs -- languages, per-level caps, delays and timeouts."""

from __future__ import annotations

from dataclasses import dataclass, field

import config_env
from domain.location import Level

LANGUAGE_NAMES = {
    "te": "Telugu", "hi": "Hindi", "kn": "Kannada",
    "ta": "Tamil", "mr": "Marathi", "bn": "Bengali",
    "ur": "Urdu", "gu": "Gujarati", "ml": "Malayalam",
    "pa": "Punjabi", "or": "Odia", "as": "Assamese",
    "en": "English", "fr": "French", "es": "Spanish", "de": "German",
}

# How each level is called in prompts
LEVEL_LABELS = {
    Level.REGION: ("state", "states"),
    Level.SUB_REGION: ("district", "districts"),
    Level.LOCAL_AREA: ("mandal/tehsil", "mandals/tehsils"),
    Level.SETTLEMENT: ("village", "villages"),
}


def _default_max_items() -> dict:
    return {Level.parse(k): v for k, v in config_env.POPULATE_MAX_ITEMS.items()}


@dataclass
class PopulateSettings:
    languages: list[str] = field(default_factory=lambda: list(config_env.AUTO_LANGUAGES))
    country: str = config_env.LOCATION_COUNTRY
    max_items: dict = field(default_factory=_default_max_items)
    # Only the first N local areas of each sub-region get their settlements fetched
    settlement_parent_limit: int = config_env.POPULATE_SETTLEMENT_PARENT_LIMIT
    request_delay: float = config_env.POPULATE_REQUEST_DELAY
    fetch_attempts: int = config_env.POPULATE_FETCH_ATTEMPTS
    translation_batch_size: int = config_env.POPULATE_TRANSLATION_BATCH
    timeout_seconds: float = config_env.LLM_TIMEOUT_SECONDS
    level_labels: dict = field(default_factory=lambda: dict(LEVEL_LABELS))

    def cap_for(self, level: Level) -> int:
        return int(self.max_items.get(level, 40))

    def descend_limit(self, level: Level):
        """How many children of ``level`` are walked further down, None = all."""
        if level is Level.LOCAL_AREA:
            return self.settlement_parent_limit
        return None


def language_label(code: str) -> str:
    return LANGUAGE_NAMES.get(code, code)


def normalize_languages(languages, default=None) -> list[str]:
    """Trim, lower-case and de-duplicate, keeping order. Empty -> default."""
    result = []
    for lang in languages or []:
        code = str(lang).strip().lower()
        if code and code not in result:
            result.append(code)
    if not result:
        return list(default or [])
    return result
