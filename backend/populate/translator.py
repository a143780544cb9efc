"""Batched place-name translation -- one external call per batch of names."""

from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from domain.location import normalize_name

from . import response_parser
from .errors import DataSourceError
from .settings import language_label

logger = logging.getLogger(__name__)


def build_translation_prompt(names: Sequence[str], languages: Sequence[str], context: str = "") -> str:
    labels = ", ".join(f"{language_label(code)} ({code})" for code in languages)
    example = ", ".join(f'"{code}": "name in {language_label(code)}"' for code in languages)
    where = f" They are places in {context}." if context else ""
    return (
        f"Translate these place names to {labels}.{where}\n"
        "Use the spelling commonly used in each language; transliterate proper names.\n"
        f"Names: {json.dumps(list(names), ensure_ascii=False)}\n"
        f"Language codes: {json.dumps(list(languages))}\n"
        "Return ONLY valid JSON:\n"
        '{\n  "translations": {\n    "Place Name": { ' + example + " }\n  }\n}"
    )


class Translator:
    def __init__(self, client):
        self.client = client

    async def translate(
        self,
        names: Sequence[str],
        languages: Sequence[str],
        context: str = "",
    ) -> Optional[dict[str, dict[str, str]]]:
        """
        Returns {requested name: {language: localized name}}.

        Only requested names and languages with non-empty values are kept.
        Returns None when the call fails or the answer is unusable, so callers
        can carry on without localized names for this batch.
        """
        if not names or not languages:
            return {}

        prompt = build_translation_prompt(names, languages, context)
        try:
            raw = await self.client.complete(prompt)
        except DataSourceError as e:
            logger.warning("Translation of %d names failed: %s", len(names), e)
            return None

        data = response_parser.parse(raw)
        if not isinstance(data, dict):
            logger.warning("Unusable translation response for %d names", len(names))
            return None
        table = data.get("translations", data)
        if not isinstance(table, dict):
            return None

        by_key = {normalize_name(str(k)): v for k, v in table.items()}
        result: dict[str, dict[str, str]] = {}
        for name in names:
            localized = by_key.get(normalize_name(name))
            if not isinstance(localized, dict):
                continue
            kept = {
                lang: localized[lang].strip()
                for lang in languages
                if isinstance(localized.get(lang), str) and localized[lang].strip()
            }
            if kept:
                result[name] = kept
        return result
