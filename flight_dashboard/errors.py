"""Exception taxonomy shared by the search, cache and favorites layers."""

from __future__ import annotations

from typing import Optional


class FlightsApiError(RuntimeError):
    """Communication with the flights backend failed."""

    def __init__(
        self, message: str, status_code: Optional[int] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class SearchError(RuntimeError):
    """A search could not produce results (network, HTTP or parse failure)."""

    def __init__(self, message: str = "Failed to fetch flights") -> None:
        super().__init__(message)
        self.message = message


class AuthRequired(PermissionError):
    """Raised before any network call when no bearer token is stored."""


class FavoriteError(RuntimeError):
    """Remote save/delete of a favorite failed."""

    def __init__(self, message: str, itinerary_id: str) -> None:
        super().__init__(message)
        self.itinerary_id = itinerary_id


class NormalizationSkip(ValueError):
    """A single raw offer could not be normalized and is dropped."""


__all__ = [
    "FlightsApiError",
    "SearchError",
    "AuthRequired",
    "FavoriteError",
    "NormalizationSkip",
]
