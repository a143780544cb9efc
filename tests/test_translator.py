"""Tests for batched translation of place names."""

import json

from backend.populate.errors import DataSourceTransportError
from backend.populate.translator import Translator, build_translation_prompt


class ScriptedClient:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.prompts = []

    async def complete(self, prompt, *, system_prompt=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response if isinstance(self.response, str) else json.dumps(self.response, ensure_ascii=False)


def test_prompt_lists_names_and_languages():
    prompt = build_translation_prompt(["Nalgonda", "Warangal"], ["te", "hi"], "Telangana, India")

    assert "Telugu (te), Hindi (hi)" in prompt
    assert "places in Telangana, India" in prompt
    assert 'Names: ["Nalgonda", "Warangal"]' in prompt
    assert 'Language codes: ["te", "hi"]' in prompt


async def test_translates_batch_in_one_call():
    client = ScriptedClient({
        "translations": {
            "Nalgonda": {"te": "నల్గొండ", "hi": "नलगोंडा"},
            "Warangal": {"te": "వరంగల్", "hi": "वारंगल"},
        }
    })

    result = await Translator(client).translate(["Nalgonda", "Warangal"], ["te", "hi"])

    assert len(client.prompts) == 1
    assert result == {
        "Nalgonda": {"te": "నల్గొండ", "hi": "नलगोंडा"},
        "Warangal": {"te": "వరంగల్", "hi": "वारंगल"},
    }


async def test_keys_matched_case_insensitively():
    client = ScriptedClient({"translations": {"NALGONDA": {"te": "నల్గొండ"}}})

    result = await Translator(client).translate(["Nalgonda"], ["te"])

    assert result == {"Nalgonda": {"te": "నల్గొండ"}}


async def test_unrequested_and_empty_values_dropped():
    client = ScriptedClient({
        "translations": {
            "Nalgonda": {"te": "నల్గొండ", "hi": "  ", "fr": "Nalgonda", "ta": 5},
            "Unknown Place": {"te": "x"},
        }
    })

    result = await Translator(client).translate(["Nalgonda", "Warangal"], ["te", "hi", "ta"])

    assert result == {"Nalgonda": {"te": "నల్గొండ"}}


async def test_top_level_table_without_wrapper():
    client = ScriptedClient('```json\n{"Nalgonda": {"te": "నల్గొండ"}}\n```')

    assert await Translator(client).translate(["Nalgonda"], ["te"]) == {"Nalgonda": {"te": "నల్గొండ"}}


async def test_failure_returns_none():
    client = ScriptedClient(error=DataSourceTransportError("502"))

    assert await Translator(client).translate(["Nalgonda"], ["te"]) is None


async def test_unparseable_returns_none():
    assert await Translator(ScriptedClient("not json")).translate(["Nalgonda"], ["te"]) is None
    assert await Translator(ScriptedClient('["a"]')).translate(["Nalgonda"], ["te"]) is None


async def test_nothing_to_do_makes_no_call():
    client = ScriptedClient({})

    assert await Translator(client).translate([], ["te"]) == {}
    assert await Translator(client).translate(["Nalgonda"], []) == {}
    assert client.prompts == []
