"""Provider interfaces and data structures for the upstream rate source."""

from .base import BaseRateProvider, ProviderError, ProviderRequestError, ProviderUnavailable
from .fixer_client import FixerAPIError, FixerClient, FixerClientConfig
from .fixer_provider import FixerRateProvider
from .restrictions import RestrictedCredentials
from .schemas import FixerErrorDetail, FixerResponse, RateSnapshot

__all__ = [
    "BaseRateProvider",
    "ProviderError",
    "ProviderRequestError",
    "ProviderUnavailable",
    "FixerAPIError",
    "FixerClient",
    "FixerClientConfig",
    "FixerRateProvider",
    "RestrictedCredentials",
    "FixerErrorDetail",
    "FixerResponse",
    "RateSnapshot",
]
