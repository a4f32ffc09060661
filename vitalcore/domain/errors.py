"""
Error taxonomy for the lab normalization core.

Only genuinely fatal conditions are exceptions. Soft outcomes (unresolved test
names, unparseable ranges, short series, degenerate regressions) are expressed
in the returned values instead.
"""


class VitalCoreError(Exception):
    """Base class for all errors raised by vitalcore."""


class LabImportError(VitalCoreError, ValueError):
    """A lab report could not be imported; nothing was emitted."""


class CatalogError(VitalCoreError):
    """The canonical test table is inconsistent (duplicate id or alias)."""


class StoreError(VitalCoreError):
    """A persistence collaborator failed or timed out."""


class PartialImportError(StoreError):
    """
    A save failed midway through an import.

    Panels saved before the failure stay in the store; their ids are listed in
    ``saved_ids`` so the caller can keep or remove them.
    """

    def __init__(self, message: str, saved_ids: list[str], cause: StoreError) -> None:
        super().__init__(message)
        self.saved_ids = saved_ids
        self.cause = cause
