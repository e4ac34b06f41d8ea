"""Registry of configured data providers.

Maps provider names to adapter classes and groups them by concept. A
provider is only available when its API key is configured, either through
the environment (SYNTH_API_KEY, FMP_API_KEY) or the secrets store.
"""

import logging

from security_data.config import NullSecretsStore, SecretsStore, Settings, settings
from security_data.services.providers.base import Provider
from security_data.services.providers.fmp import FmpProvider
from security_data.services.providers.synth import SynthProvider
from security_data.services.shared.error_reporting import ErrorReporter

logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Configured providers for one concept, in fallback order.

    Example usage:
        registry = ProviderRegistry.for_concept("securities")
        for provider in registry.providers:
            response = provider.fetch_security_info("AAPL", "XNAS")
    """

    _provider_classes: dict[str, type[Provider]] = {
        "synth": SynthProvider,
        "fmp": FmpProvider,
    }

    # Order matters: the first configured provider is the primary
    _concepts: dict[str, tuple[str, ...]] = {
        "securities": ("synth", "fmp"),
    }

    def __init__(
        self,
        concept: str,
        secrets_store: SecretsStore | None = None,
        app_settings: Settings | None = None,
        error_reporter: ErrorReporter | None = None,
    ):
        if concept not in self._concepts:
            supported = list(self._concepts.keys())
            raise ValueError(f"Unsupported provider concept '{concept}'. Supported: {supported}")

        self.concept = concept
        self.secrets_store = secrets_store or NullSecretsStore()
        self.app_settings = app_settings or settings
        self.error_reporter = error_reporter
        self._instances: dict[str, Provider | None] = {}

    @classmethod
    def for_concept(
        cls,
        concept: str,
        secrets_store: SecretsStore | None = None,
        app_settings: Settings | None = None,
        error_reporter: ErrorReporter | None = None,
    ) -> "ProviderRegistry":
        return cls(
            concept,
            secrets_store=secrets_store,
            app_settings=app_settings,
            error_reporter=error_reporter,
        )

    @property
    def provider_names(self) -> tuple[str, ...]:
        return self._concepts[self.concept]

    @property
    def providers(self) -> list[Provider]:
        """Configured providers in fallback order."""
        providers = [self.get_provider(name) for name in self.provider_names]
        return [provider for provider in providers if provider is not None]

    @property
    def primary_provider(self) -> Provider | None:
        return self.get_provider(self.provider_names[0])

    @property
    def fallback_provider(self) -> Provider | None:
        if len(self.provider_names) < 2:
            return None
        return self.get_provider(self.provider_names[1])

    def get_provider(self, name: str) -> Provider | None:
        """Get the provider instance for ``name``, or None if it has no API key.

        Raises:
            ValueError: If the provider is not part of this concept
        """
        if name not in self.provider_names:
            raise ValueError(
                f"Provider '{name}' is not available for concept '{self.concept}'. "
                f"Supported: {list(self.provider_names)}"
            )

        if name not in self._instances:
            self._instances[name] = self._build_provider(name)
        return self._instances[name]

    def _build_provider(self, name: str) -> Provider | None:
        api_key = self._api_key_for(name)
        if not api_key:
            logger.info(f"Provider {name} not configured: no API key")
            return None

        provider_class = self._provider_classes[name]
        return provider_class(api_key, error_reporter=self.error_reporter)

    def _api_key_for(self, name: str) -> str | None:
        setting_name = f"{name}_api_key"
        return getattr(self.app_settings, setting_name, None) or self.secrets_store.get(
            setting_name
        )
