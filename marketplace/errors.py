# marketplace/errors.py
"""Domain errors raised below the HTTP layer.

Routes translate these into status codes: client errors (400), missing rows
(404) and cache backend failures (500).
"""


class MarketplaceError(Exception):
    """Base class for errors the HTTP layer knows how to map."""


class InvalidRangeIndex(MarketplaceError):
    """A range bucket id is not numeric or outside the catalog entry."""


class NoSearchCondition(MarketplaceError):
    """A search request carried no filter at all."""


class InvalidPayload(MarketplaceError):
    """A request body or uploaded file could not be decoded."""


class NotFound(MarketplaceError):
    """No row for the requested id (or the chair is sold out)."""


class CacheBackendError(MarketplaceError):
    """The cache store failed for a reason other than a missing entry."""
