from __future__ import annotations


class WasteTrackerError(ValueError):
    """Base class for domain failures shown to the user as-is."""


class ValidationError(WasteTrackerError):
    pass


class DuplicateNameError(WasteTrackerError):
    def __init__(self, kind: str, name: str):
        super().__init__(f"{kind.capitalize()} '{name}' already exists.")
        self.kind = kind
        self.name = name


class NotFoundError(WasteTrackerError):
    pass


class StoreUnavailableError(WasteTrackerError):
    """The record store could not be read; callers show nothing rather than stale data."""
