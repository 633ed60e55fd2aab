import asyncio
from types import SimpleNamespace

import pytest
from openai import OpenAIError

from cafeteria.api import api_ai
from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.utilities import config
from cafeteria.utilities.constants import INSIGHTS_FALLBACK, INSIGHTS_NOT_CONFIGURED

INVENTORY = [
    InventoryItem("1", "Rice", "Non-Perishable", 12, "kg", 20),
    InventoryItem("10", "Egg", "Perishable", 60, "un", 30),
]


def fake_client(create):
    return SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))


def test_inventory_context_lists_every_item():
    context = api_ai.build_inventory_context(INVENTORY)
    assert "- Rice: 12 kg (Minimum: 20)" in context
    assert "- Egg: 60 un (Minimum: 30)" in context


@pytest.mark.asyncio
async def test_answer_is_returned(monkeypatch):
    seen = {}

    async def create(**kwargs):
        seen.update(kwargs)
        message = SimpleNamespace(content="  Cook rice with eggs today.  ")
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])

    monkeypatch.setattr(api_ai, "_get_openai_client", lambda: fake_client(create))
    result = await api_ai.request_insights(INVENTORY, "What should we cook?")
    assert result.ok
    assert result.text == "Cook rice with eggs today."
    assert "Rice: 12 kg" in seen["messages"][0]["content"]
    assert seen["messages"][1] == {"role": "user", "content": "What should we cook?"}


@pytest.mark.asyncio
async def test_missing_key_is_reported(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", "")
    assert await api_ai.generate_insights(INVENTORY, "Anything?") == INSIGHTS_NOT_CONFIGURED


@pytest.mark.asyncio
async def test_api_error_falls_back(monkeypatch):
    async def create(**kwargs):
        raise OpenAIError("service unavailable")

    monkeypatch.setattr(api_ai, "_get_openai_client", lambda: fake_client(create))
    assert await api_ai.generate_insights(INVENTORY, "Anything?") == INSIGHTS_FALLBACK


@pytest.mark.asyncio
async def test_slow_answer_times_out():
    async def create(**kwargs):
        await asyncio.sleep(5)

    result = await api_ai.request_insights(INVENTORY, "Anything?", client=fake_client(create), timeout=0.01)
    assert not result.ok
    assert result.error == "timeout"
    assert result.text == INSIGHTS_FALLBACK
