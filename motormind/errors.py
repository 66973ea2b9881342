"""Error taxonomy shared by the resolution core and the HTTP boundary."""

from __future__ import annotations


class MotorMindError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class OracleEmptyResponse(MotorMindError):
    """The oracle returned no content for a resolution step."""

    status_code = 502

    def __init__(self, step: str) -> None:
        super().__init__(f"No response received from AI during {step}")
        self.step = step


class StockLedgerError(MotorMindError):
    """Base class for stock decrement precondition failures."""

    def __init__(self, unit_id: str, message: str) -> None:
        super().__init__(message)
        self.unit_id = unit_id


class UnitNotFound(StockLedgerError):
    status_code = 404

    def __init__(self, unit_id: str) -> None:
        super().__init__(unit_id, f"Vehicle with id {unit_id} not found")


class OutOfStock(StockLedgerError):
    status_code = 409

    def __init__(self, unit_id: str) -> None:
        super().__init__(unit_id, f"Vehicle with id {unit_id} is out of stock")
