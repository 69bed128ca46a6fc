"""
Domain exceptions.

Typed exceptions for explicit error handling.
Only InvalidInputError ever reaches the caller of the pipeline; source
failures are absorbed by the resolver and turned into metadata warnings.
"""

from __future__ import annotations

from typing import Any, Optional


# ═══════════════════════════════════════════════════════════
# BASE EXCEPTION
# ═══════════════════════════════════════════════════════════


class DomainError(Exception):
    """
    Base exception for all domain errors.

    All domain-specific exceptions inherit from this.
    Allows catching all domain errors with single except clause.
    """

    pass


# ═══════════════════════════════════════════════════════════
# ANALYSIS EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class AnalysisDomainError(DomainError):
    """Base exception for the food analysis domain."""

    pass


class InvalidInputError(AnalysisDomainError, ValueError):
    """
    Malformed analysis input.

    Raised when:
    - data is missing or blank
    - input type is not one of image, barcode, text, voice
    - barcode has no usable digits

    Raised before any I/O takes place.

    Example:
        >>> raise InvalidInputError("Input data cannot be empty")
    """

    pass


class NoItemsResolvedError(AnalysisDomainError):
    """
    Every food item of a request failed to resolve.

    The pipeline converts this into a failed FoodAnalysisResult carrying
    an explanatory message instead of fabricated nutrition.

    Example:
        >>> raise NoItemsResolvedError("0 of 2 items resolved")
    """

    def __init__(
        self,
        message: str,
        total_items: int = 0,
        resolutions: Optional[list[Any]] = None,
    ) -> None:
        super().__init__(message)
        self.total_items = total_items
        self.resolutions = resolutions or []


class BarcodeNotFoundError(AnalysisDomainError):
    """
    Barcode not found in database.

    Raised when:
    - OpenFoodFacts has no data for barcode
    - OpenFoodFacts answers with status 0

    The OpenFoodFacts source maps it to a plain "not found".

    Example:
        >>> raise BarcodeNotFoundError("Barcode 123456789 not found")
    """

    pass


# ═══════════════════════════════════════════════════════════
# EXTERNAL SERVICE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class ExternalServiceError(DomainError):
    """
    External service call failed.

    Base class for all external service errors.

    Raised when:
    - API call fails
    - Network error
    - Service unavailable

    Example:
        >>> raise ExternalServiceError("OpenAI API failed: timeout")
    """

    pass


class SourceUnavailableError(ExternalServiceError):
    """
    A nutrition source could not be reached.

    Raised when:
    - transport failure or 5xx answer
    - authentication error (401/403)
    - source not configured (missing API key)

    Recovered locally by falling back to the next source.

    Example:
        >>> raise SourceUnavailableError("USDA API error: 503")
    """

    pass


class SourceTimeoutError(SourceUnavailableError):
    """
    A nutrition source did not answer in time.

    Treated like a miss for fallback purposes but tagged ``timeout``
    in item attempts and metadata.

    Example:
        >>> raise SourceTimeoutError("USDA API timeout after 5s")
    """

    pass


class RateLimitError(SourceUnavailableError):
    """
    API rate limit exceeded.

    Raised when:
    - Too many requests (HTTP 429)
    - Local token bucket would wait longer than a minute

    Example:
        >>> raise RateLimitError("USDA rate limit: 1000 requests/hour")
    """

    pass


# ═══════════════════════════════════════════════════════════
# INFRASTRUCTURE EXCEPTIONS
# ═══════════════════════════════════════════════════════════


class InfrastructureError(DomainError):
    """
    Infrastructure layer error.

    Base class for cache and storage errors.
    """

    pass


class CacheError(InfrastructureError):
    """
    Cache operation failed.

    Raised when:
    - Stored entry cannot be deserialized
    - Backing store unavailable

    Example:
        >>> raise CacheError("Corrupted cache entry for key abc123")
    """

    pass
