"""Error taxonomy for the food logging pipeline."""


class FoodLedgerError(Exception):
    """Base class for errors surfaced to the user."""


class ValidationError(FoodLedgerError):
    """Input rejected before any state change (file, goal or profile fields)."""


class IntakeStateError(FoodLedgerError):
    """Operation is not allowed in the current intake state."""


class InferenceError(FoodLedgerError):
    """Food analysis failed: transport, timeout or malformed response."""


class AssetUploadError(FoodLedgerError):
    """Image upload failed before an entry was written."""


class PersistenceError(FoodLedgerError):
    """The record store rejected a write."""
