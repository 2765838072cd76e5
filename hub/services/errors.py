"""Domain errors raised by services and translated to HTTP responses by the routers."""


class HubError(Exception):
    """Base class for business rule violations."""


class ReturnQuantityError(HubError):
    """Return would exceed the remaining (quantity - returned_quantity) of an item."""


class InvalidReturnTarget(HubError):
    """The item cannot be returned or swapped (e.g. it is itself a swap-in line)."""


class SaleItemNotFound(HubError):
    """Item id does not belong to the sale."""


class FirmLocked(HubError):
    """New B2B sales are blocked for a locked firm."""
