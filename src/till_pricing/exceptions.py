"""Till exceptions."""

from typing import Any


ERROR_MESSAGES = {
    "INVALID_JSON": "Invalid JSON file",
    "INVALID_DOCUMENT": "Invalid catalog document",
    "WRONG_PIN": "Wrong PIN",
    "ADMIN_LOCKED": "Enter PIN to edit prices",
    "INVALID_AMOUNT": "Invalid amount",
    "PRODUCT_NOT_FOUND": "Product not found",
    "BAND_NOT_FOUND": "Price band not found",
    "UNIT_NOT_FOUND": "Unit not found",
    "NOT_OVERRIDE_PRICED": "Product is priced by a band",
    "LINE_NOT_FOUND": "Basket line not found",
}


class TillError(Exception):
    """
    Structured exception for catalog, basket and admin operations.

    The pricing engine itself never raises this; it is reserved for the
    collaborators around it (import, PIN gate, price entry, basket edits).

    Usage:
        try:
            service.import_json(text)
        except TillError as e:
            if e.code == "INVALID_JSON":
                print(e.message)
    """

    def __init__(self, code: str, message: str = "", **data: Any) -> None:
        self.code = code
        self.message = message or ERROR_MESSAGES.get(code, code)
        self.data = data
        super().__init__(f"[{code}] {self.message}")

    def as_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }
