"""
Base classes for LLM providers

Defines the abstract interface that all content-generation providers must
implement.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from app.config.providers import CONTENT_MAX_TOKENS, ContentProviderType as ProviderType


@dataclass
class LLMConfig:
    """Configuration for an LLM request"""
    model: str
    temperature: float = 0.7
    max_tokens: Optional[int] = CONTENT_MAX_TOKENS
    system_instruction: Optional[str] = None
    # Ask the provider for a JSON-only response where it supports that
    json_mode: bool = False

    # Provider-specific options
    extra_options: Dict[str, Any] = field(default_factory=dict)


@dataclass
class UsageStats:
    """Token usage statistics"""
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        if self.total_tokens == 0:
            self.total_tokens = self.input_tokens + self.output_tokens


@dataclass
class LLMResponse:
    """Unified response from any LLM provider"""
    text: str
    model: str
    provider: ProviderType
    usage: Optional[UsageStats] = None
    raw_response: Any = None


class LLMProvider(ABC):
    """Abstract base class for LLM providers

    Providers raise on transport or API errors; callers decide whether a
    failure is fatal.
    """

    provider_type: ProviderType
    default_model: str = ""

    @abstractmethod
    async def generate(
        self,
        prompt: str,
        config: Optional[LLMConfig] = None,
    ) -> LLMResponse:
        """Generate a response from the LLM

        Args:
            prompt: The prompt text
            config: LLM configuration options

        Returns:
            LLMResponse with the generated text and metadata
        """

    @abstractmethod
    def is_available(self) -> bool:
        """True if the provider is configured well enough to attempt a call"""

    def default_config(self) -> LLMConfig:
        return LLMConfig(model=self.default_model)

    @property
    def name(self) -> str:
        """Get the provider name"""
        return self.provider_type.value


__all__ = [
    "ProviderType",
    "LLMConfig",
    "UsageStats",
    "LLMResponse",
    "LLMProvider",
]
