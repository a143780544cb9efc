"""
LLM data source -- one chat-completion request per call against an
OpenAI-compatible endpoint (OpenAI, NeuroAPI, local gateways).

Every request is deterministic (temperature 0) and asks for a JSON object.
Timeouts are enforced here by cancelling the request; nothing is retried at
this layer, retry policy belongs to the populator.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from openai import APITimeoutError, AsyncOpenAI, OpenAIError

import config_env
from domain.location import Level

from .errors import DataSourceTimeout, DataSourceTransportError
from .settings import LEVEL_LABELS

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a geographic data expert. Provide accurate administrative location "
    "data in valid JSON format only. Do not add any extra text or explanations."
)


def build_children_prompt(
    level: Level,
    path: Sequence[str],
    max_items: int,
    country: str = "",
    labels: dict | None = None,
) -> str:
    """User instruction asking for the ``level`` children of the node at ``path``."""
    labels = labels or LEVEL_LABELS
    singular, plural = labels[level]
    # path runs from the region down to the parent, e.g. ["Telangana", "Nalgonda"]
    levels = list(Level)
    scope = [f"{name} {labels[levels[depth]][0]}" for depth, name in enumerate(path)]
    scope.reverse()
    if country:
        scope.append(country)
    where = ", ".join(scope)

    return (
        f"List {plural} in {where}.\n"
        f"Give the official English name of each {singular}.\n"
        "Return ONLY valid JSON in this exact format:\n"
        '{\n  "items": [\n    { "name": "English Name" }\n  ]\n}\n'
        f"Maximum {max_items} {plural}. No duplicates."
    )


class DataSourceClient:
    """Async LLM client used for both child listings and name translations."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
        country: Optional[str] = None,
        client=None,
    ):
        self.api_key = api_key if api_key is not None else config_env.LLM_API_KEY
        self.base_url = base_url or config_env.LLM_BASE_URL
        self.model_name = model or config_env.LLM_MODEL
        self.timeout = timeout if timeout is not None else config_env.LLM_TIMEOUT_SECONDS
        self.country = config_env.LOCATION_COUNTRY if country is None else country
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            logger.info("Initialising LLM client (%s) at %s", self.model_name, self.base_url)
            self._client = AsyncOpenAI(
                api_key=self.api_key,
                base_url=self.base_url,
                # retries are the populator's decision
                max_retries=0,
            )
        return self._client

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    async def complete(self, prompt: str, *, system_prompt: str = SYSTEM_PROMPT) -> str:
        """Send one JSON-only request and return the raw text of the first choice."""
        try:
            client = self._get_client()
            response = await asyncio.wait_for(
                client.chat.completions.create(
                    model=self.model_name,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": prompt},
                    ],
                    temperature=0,
                    response_format={"type": "json_object"},
                ),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, APITimeoutError) as e:
            logger.warning("LLM request timed out after %.0fs", self.timeout)
            raise DataSourceTimeout(f"LLM request timed out after {self.timeout:.0f}s") from e
        except OpenAIError as e:
            logger.warning("LLM request failed: %s", e)
            raise DataSourceTransportError(str(e) or e.__class__.__name__) from e

        if not getattr(response, "choices", None):
            return ""
        return response.choices[0].message.content or ""

    async def fetch_children(self, level: Level, path: Sequence[str], max_items: int, labels: dict | None = None) -> str:
        prompt = build_children_prompt(level, path, max_items, country=self.country, labels=labels)
        logger.debug("Fetching %s for %s", level.value, " / ".join(path))
        return await self.complete(prompt)
