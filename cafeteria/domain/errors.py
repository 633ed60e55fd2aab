"""Domain exceptions raised by the ledger and the planning engine."""


class LedgerError(Exception):
    """Base class for inventory ledger failures."""


class ItemNotFoundError(LedgerError, KeyError):
    def __init__(self, item_id: str):
        super().__init__(item_id)
        self.item_id = item_id

    def __str__(self) -> str:
        return f"Inventory item '{self.item_id}' not found"


class ReceivingEventNotFoundError(LedgerError, KeyError):
    def __init__(self, event_id: str):
        super().__init__(event_id)
        self.event_id = event_id

    def __str__(self) -> str:
        return f"Receiving event '{self.event_id}' not found"


class StockUnderflowError(LedgerError, ValueError):
    """Raised by exact delta application when an item would go below zero."""

    def __init__(self, shortfalls: dict):
        self.shortfalls = dict(shortfalls)
        names = ", ".join(f"{k} ({v:g})" for k, v in self.shortfalls.items())
        super().__init__(f"Stock would become negative for: {names}")


class MissingConversionError(LedgerError, ValueError):
    """A count/pack item has no grams-per-unit from the reference tables or its own measure weight."""

    def __init__(self, item_name: str, unit: str):
        self.item_name = item_name
        self.unit = unit
        super().__init__(
            f"No grams-per-unit configured for '{item_name}' (unit '{unit}'); "
            "add a household conversion or set the item's measure weight"
        )


class PlanNotConfirmableError(LedgerError):
    """Raised when confirming an empty plan or one with a shortage."""

    def __init__(self, message: str, lacking=None):
        super().__init__(message)
        self.lacking = list(lacking or [])
