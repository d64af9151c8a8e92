from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Literal, Mapping, Optional

if TYPE_CHECKING:
    from ._retry import RetryConfig
    from .cancel import CancelToken

Role = Literal["system", "user", "assistant"]


@dataclass(frozen=True)
class LLMMessage:
    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class ProviderConfig:
    """Connection settings for one provider, owned by the caller.

    The core only ever reads this object.
    """

    provider: str
    api_key: str
    model: str
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 2000

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProviderConfig":
        """Build from the settings store shape (camelCase or snake_case keys)."""

        def pick(*keys: str, default: Any = None) -> Any:
            for k in keys:
                if k in data and data[k] is not None:
                    return data[k]
            return default

        return cls(
            provider=str(pick("provider", default="openai")),
            api_key=str(pick("apiKey", "api_key", default="")),
            model=str(pick("model", default="")),
            base_url=pick("baseUrl", "base_url") or None,
            temperature=float(pick("temperature", default=0.7)),
            max_tokens=int(pick("maxTokens", "max_tokens", default=2000)),
        )


@dataclass(frozen=True)
class ChatRequest:
    config: ProviderConfig
    messages: List[LLMMessage]
    model: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    timeout_s: Optional[float] = None
    cancel: Optional["CancelToken"] = None
    url_override: Optional[str] = None
    retry: Optional["RetryConfig"] = None


@dataclass(frozen=True)
class ChatResult:
    """Provider-neutral result container."""

    content: str
    raw: Any = field(default=None, repr=False)
