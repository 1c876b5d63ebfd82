from __future__ import annotations

from ..config.models import ProviderSettings
from .catalog import ModelChoice
from .openai_compat import OpenAICompatProvider, ProviderError


def resolve_provider(settings: ProviderSettings, model: ModelChoice) -> OpenAICompatProvider:
    if not settings.base_url:
        raise ProviderError(
            "Missing provider base_url. Set provider.base_url in pyorange.yaml or PYORANGE_BASE_URL."
        )
    return OpenAICompatProvider(
        model=model.model_id,
        base_url=settings.base_url,
        api_key=settings.api_key,
        timeout=settings.timeout,
    )
