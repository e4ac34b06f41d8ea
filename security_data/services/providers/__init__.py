"""External securities data providers.

This module centralizes all vendor access for securities:
- SynthProvider: primary vendor (Synth Finance)
- FmpProvider: fallback vendor (Financial Modeling Prep)
- SecuritiesProviderChain: runs an operation against providers in order
- ProviderRegistry: builds the configured providers for a concept

Usage:
    from security_data.services.providers import ProviderRegistry, SecuritiesProviderChain

    chain = SecuritiesProviderChain(ProviderRegistry.for_concept("securities").providers)
    response = chain.search_securities("AAPL", country_code="US")
"""

from .base import Provider, ProviderError, ProviderResponse, SecurityConcept
from .fallback import SecuritiesProviderChain
from .fmp import FmpAuthenticationError, FmpError, FmpProvider
from .registry import ProviderRegistry
from .synth import SynthAuthenticationError, SynthError, SynthProvider
from .types import Price, Security, SecurityInfo

__all__ = [
    "FmpAuthenticationError",
    "FmpError",
    "FmpProvider",
    "Price",
    "Provider",
    "ProviderError",
    "ProviderRegistry",
    "ProviderResponse",
    "SecuritiesProviderChain",
    "Security",
    "SecurityConcept",
    "SecurityInfo",
    "SynthAuthenticationError",
    "SynthError",
    "SynthProvider",
]
