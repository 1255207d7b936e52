from dataclasses import dataclass


@dataclass
class ValidationError:
    message: str
    sale_code: str | None = None
    item_sequence: int | None = None
    field: str | None = None
