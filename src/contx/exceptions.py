# src/contx/exceptions.py
from typing import List


class ContxError(Exception): ...
class SelectionError(ContxError): ...
class SettingsError(ContxError): ...
class CostEstimationError(ContxError): ...


class CollectionCancelled(ContxError):
    """Raised when a run is cancelled; carries the records collected so far."""

    def __init__(self, records: List) -> None:
        super().__init__(f"Collection cancelled after {len(records)} file(s)")
        self.records = records
