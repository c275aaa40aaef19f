"""Domain errors for the nutrition log."""


class NutritionLogError(Exception):
    """Base class for nutrition log errors."""


class NotAuthenticatedError(NutritionLogError):
    """Raised when an operation needs a signed-in user and none is present."""


class StoreUnavailableError(NutritionLogError):
    """Raised when a backing store cannot be reached or returns an error."""


class TableMissingError(StoreUnavailableError):
    """Raised when an optional table has not been provisioned yet."""


class NoPendingConflictError(NutritionLogError):
    """Raised when a resolution is given for a date with no open conflict."""
