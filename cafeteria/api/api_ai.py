import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from fastapi import APIRouter
from openai import AsyncOpenAI, OpenAIError

from cafeteria.domain.InventoryItem import InventoryItem
from cafeteria.utilities import config
from cafeteria.utilities.validators import InsightQuestion
from cafeteria.utilities.constants import (
    INSIGHTS_EMPTY, INSIGHTS_FALLBACK, INSIGHTS_NOT_CONFIGURED, INSIGHTS_SYSTEM_PROMPT
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsightResult:
    ok: bool
    text: str
    error: Optional[str] = None


# === Helper: Get OpenAI Client ===
def _get_openai_client() -> Optional[AsyncOpenAI]:
    """Return an async OpenAI client if OPENAI_API_KEY is set, otherwise None."""
    api_key = config.OPENAI_API_KEY
    if not api_key:
        return None
    return AsyncOpenAI(api_key=api_key)


def build_inventory_context(inventory: Sequence[InventoryItem]) -> str:
    return "\n".join(f"- {i.name}: {i.quantity:g} {i.unit} (Minimum: {i.min_stock:g})" for i in inventory)


async def request_insights(inventory: Sequence[InventoryItem], question: str,
                           client: Optional[AsyncOpenAI] = None,
                           timeout: Optional[float] = None) -> InsightResult:
    """Ask the model about the current stock, bounded by a timeout. Never raises."""
    client = client or _get_openai_client()
    if client is None:
        logger.warning("OPENAI_API_KEY not set; cannot generate insights")
        return InsightResult(False, INSIGHTS_NOT_CONFIGURED, error="not_configured")

    system_prompt = INSIGHTS_SYSTEM_PROMPT.format(inventory=build_inventory_context(inventory))
    try:
        response = await asyncio.wait_for(
            client.chat.completions.create(
                model=config.INSIGHTS_MODEL,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": question},
                ],
            ),
            timeout=timeout if timeout is not None else config.INSIGHTS_TIMEOUT_SECONDS,
        )
    except asyncio.TimeoutError:
        logger.error("Insight request timed out")
        return InsightResult(False, INSIGHTS_FALLBACK, error="timeout")
    except OpenAIError as e:
        logger.error(f"Insight request failed: {e}")
        return InsightResult(False, INSIGHTS_FALLBACK, error=type(e).__name__)

    text = ""
    if response.choices:
        text = (response.choices[0].message.content or "").strip()
    return InsightResult(True, text or INSIGHTS_EMPTY)


async def generate_insights(inventory: Sequence[InventoryItem], question: str) -> str:
    """Plain-text answer for the chat screen; failures become a fixed apology."""
    result = await request_insights(inventory, question)
    return result.text


# === FastAPI Endpoint ===
router = APIRouter()


@router.post("/api/insights")
async def ask_insights(payload: InsightQuestion):
    from cafeteria.api.api_run import get_ledger

    result = await request_insights(get_ledger().get_inventory(), payload.question)
    return {"ok": result.ok, "answer": result.text, "error": result.error}
