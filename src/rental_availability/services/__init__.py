"""Service clients for the availability backend."""

from .availability_client import AvailabilityClient, AvailabilityFetchError, FetchResult

__all__ = [
    "AvailabilityClient",
    "AvailabilityFetchError",
    "FetchResult",
]
