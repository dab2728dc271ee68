"""Static model descriptors and the read-only registry of known models."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict

from .constants import ModelProvider


class Model(BaseModel):
    """Describes a model offered by a provider.

    Descriptors are immutable and shared process wide.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    """The registry identifier, e.g. ``infineon-gpt4o``."""

    name: str
    """Display name."""

    provider: ModelProvider
    """The provider serving the model."""

    api_model: str
    """The model name sent to the backend API."""

    cost_per_1m_in: float = 0.0
    cost_per_1m_out: float = 0.0
    cost_per_1m_in_cached: float = 0.0
    cost_per_1m_out_cached: float = 0.0

    context_window: int = 0
    """Maximum number of tokens the model accepts."""

    default_max_tokens: int = 0
    """Output token limit used when the caller does not set one."""

    can_reason: bool = False
    """Whether the model accepts a reasoning effort."""

    supports_attachments: bool = False
    """Whether user messages may carry binary attachments."""


OPENAI_MODELS: dict[str, Model] = {
    "gpt-4.1": Model(
        id="gpt-4.1",
        name="GPT 4.1",
        provider=ModelProvider.OPENAI,
        api_model="gpt-4.1",
        cost_per_1m_in=2.00,
        cost_per_1m_in_cached=0.50,
        cost_per_1m_out=8.00,
        context_window=1_047_576,
        default_max_tokens=20_000,
        supports_attachments=True,
    ),
    "gpt-4.1-mini": Model(
        id="gpt-4.1-mini",
        name="GPT 4.1 mini",
        provider=ModelProvider.OPENAI,
        api_model="gpt-4.1-mini",
        cost_per_1m_in=0.40,
        cost_per_1m_in_cached=0.10,
        cost_per_1m_out=1.60,
        context_window=200_000,
        default_max_tokens=20_000,
        supports_attachments=True,
    ),
    "gpt-4o": Model(
        id="gpt-4o",
        name="GPT 4o",
        provider=ModelProvider.OPENAI,
        api_model="gpt-4o",
        cost_per_1m_in=2.50,
        cost_per_1m_in_cached=1.25,
        cost_per_1m_out=10.00,
        context_window=128_000,
        default_max_tokens=4096,
        supports_attachments=True,
    ),
    "o4-mini": Model(
        id="o4-mini",
        name="o4 mini",
        provider=ModelProvider.OPENAI,
        api_model="o4-mini",
        cost_per_1m_in=1.10,
        cost_per_1m_in_cached=0.275,
        cost_per_1m_out=4.40,
        context_window=128_000,
        default_max_tokens=50_000,
        can_reason=True,
        supports_attachments=True,
    ),
}

INFINEON_MODELS: dict[str, Model] = {
    "infineon-gpt4o": Model(
        id="infineon-gpt4o",
        name="Infineon GPT-4o",
        provider=ModelProvider.INFINEON,
        api_model="gpt-4o",
        cost_per_1m_in=2.50,
        cost_per_1m_in_cached=1.25,
        cost_per_1m_out=10.00,
        context_window=128_000,
        default_max_tokens=4096,
        supports_attachments=True,
    ),
}

# Providers in order of popularity
PROVIDER_POPULARITY: Mapping[ModelProvider, int] = MappingProxyType(
    {
        ModelProvider.INFINEON: 1,
        ModelProvider.OPENAI: 2,
    }
)

SUPPORTED_MODELS: Mapping[str, Model] = MappingProxyType(
    {**INFINEON_MODELS, **OPENAI_MODELS}
)


def get_model(model_id: str) -> Model:
    """Look up a model descriptor by its registry id.

    Raises:
        ValueError: If the id is not registered.
    """
    try:
        return SUPPORTED_MODELS[model_id]
    except KeyError:
        raise ValueError(
            f"Unknown model '{model_id}'. Available: {sorted(SUPPORTED_MODELS)}"
        ) from None
