from typing import Final

CUSTOM_MENU_NAME: Final[str] = "Custom Menu"
DEFAULT_MEAL_TYPE: Final[str] = "Merenda"

STATUS_OK: Final[str] = "ok"
STATUS_LACK: Final[str] = "lack"

EXPIRY_EXPIRED: Final[str] = "expired"
EXPIRY_CRITICAL: Final[str] = "critical"
EXPIRY_OK: Final[str] = "ok"

INSIGHTS_FALLBACK: Final[str] = "Sorry, something went wrong while asking the assistant."
INSIGHTS_NOT_CONFIGURED: Final[str] = "Error: the assistant API key is not configured."
INSIGHTS_EMPTY: Final[str] = "I could not generate an answer."

INSIGHTS_SYSTEM_PROMPT: Final[str] = (
    """
    You are an assistant specialised in school meal management.
    You have access to the school's current stock listed below.

    Current stock:
    {inventory}

    Answer questions about what to cook, how to make the most of the stock,
    or warn about critical items. Be brief, practical and friendly.
    Suggest recipes that use the available ingredients.
    """
)
