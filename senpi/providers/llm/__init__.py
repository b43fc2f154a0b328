from typing import Dict, Optional, Type

from .base import (
    LLMProvider,
    LLMMessage,
    LLMResponse,
    LLMProviderError,
    extract_json_object,
)
from .anthropic import AnthropicProvider

PROVIDER_ALIAS_MAP: Dict[str, str] = {
    "claude": "anthropic",
}

# Registry of available LLM providers
PROVIDER_REGISTRY: Dict[str, Type[LLMProvider]] = {
    "anthropic": AnthropicProvider,
}


def canonical_provider_name(name: str) -> str:
    """Normalize provider aliases to their canonical identifier."""

    return PROVIDER_ALIAS_MAP.get(name.lower(), name.lower())


def get_llm_provider(
    provider_name: Optional[str] = None,
    model: Optional[str] = None,
    **kwargs,
) -> LLMProvider:
    """Instantiate the configured LLM provider, honoring explicit overrides."""

    from ...config import settings  # Local import to avoid circular dependency

    resolved_provider = canonical_provider_name(
        (provider_name or "").strip() or settings.llm_provider
    )
    if resolved_provider not in PROVIDER_REGISTRY:
        available_providers = ", ".join(PROVIDER_REGISTRY.keys())
        raise ValueError(
            f"Unsupported provider '{resolved_provider}'. "
            f"Available providers: {available_providers}"
        )

    if not settings.has_anthropic_key:
        raise ValueError(f"No API key configured for provider: {resolved_provider}")
    api_key = settings.anthropic_api_key

    resolved_model = (model or "").strip() or settings.llm_model
    provider_class = PROVIDER_REGISTRY[resolved_provider]
    return provider_class(api_key=api_key, model=resolved_model, **kwargs)


__all__ = [
    "LLMProvider",
    "LLMMessage",
    "LLMResponse",
    "LLMProviderError",
    "AnthropicProvider",
    "extract_json_object",
    "get_llm_provider",
    "PROVIDER_REGISTRY",
    "canonical_provider_name",
]
