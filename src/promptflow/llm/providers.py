"""Provider dialects and the provider registry.

Two wire dialects cover every supported provider:
- Anthropic Messages API (system prompt in a body field, x-api-key auth)
- OpenAI-compatible chat completions (system inline, Bearer auth)

Adding a provider is one entry in PROVIDERS.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from .types import LLMMessage, ProviderConfig

ANTHROPIC_VERSION = "2023-06-01"


class ProviderAdapter(Protocol):
    name: str

    def build_headers(self, config: ProviderConfig) -> Dict[str, str]:
        raise NotImplementedError

    def build_body(
        self,
        *,
        model: str,
        messages: Sequence[LLMMessage],
        temperature: float,
        max_tokens: int,
    ) -> Dict[str, Any]:
        raise NotImplementedError

    def parse_content(self, data: Any) -> str:
        raise NotImplementedError


def split_system_message(
    messages: Sequence[LLMMessage],
) -> Tuple[Optional[str], List[LLMMessage]]:
    """Pull the first system message out; the rest keep their order."""

    for idx, m in enumerate(messages):
        if m.role == "system":
            return m.content, [x for i, x in enumerate(messages) if i != idx]
    return None, list(messages)


class OpenAICompatibleAdapter:
    name = "openai-compatible"

    def build_headers(self, config: ProviderConfig) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {config.api_key}",
        }

    def build_body(
        self,
        *,
        model: str,
        messages: Sequence[LLMMessage],
        temperature: float,
        max_tokens: int,
    ) -> Dict[str, Any]:
        return {
            "model": model,
            "temperature": temperature,
            "max_tokens": max_tokens,
            "messages": [m.to_dict() for m in messages],
        }

    def parse_content(self, data: Any) -> str:
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return content if isinstance(content, str) else ""


class AnthropicAdapter:
    name = "anthropic"

    def build_headers(self, config: ProviderConfig) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-api-key": config.api_key,
            "anthropic-version": ANTHROPIC_VERSION,
        }

    def build_body(
        self,
        *,
        model: str,
        messages: Sequence[LLMMessage],
        temperature: float,
        max_tokens: int,
    ) -> Dict[str, Any]:
        system, remaining = split_system_message(messages)
        return {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "system": system or "",
            "messages": [m.to_dict() for m in remaining if m.role != "system"],
        }

    def parse_content(self, data: Any) -> str:
        try:
            text = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError):
            return ""
        return text if isinstance(text, str) else ""


OPENAI_COMPATIBLE = OpenAICompatibleAdapter()
ANTHROPIC = AnthropicAdapter()

CHAT_COMPLETIONS = "/chat/completions"


@dataclass(frozen=True)
class ProviderSpec:
    id: str
    default_base_url: Optional[str]
    endpoint: str = CHAT_COMPLETIONS
    adapter: ProviderAdapter = OPENAI_COMPATIBLE
    models: Tuple[str, ...] = field(default_factory=tuple)


PROVIDERS: Dict[str, ProviderSpec] = {
    p.id: p
    for p in [
        # International
        ProviderSpec(
            "openai",
            "https://api.openai.com/v1",
            models=("gpt-5.2", "gpt-5", "gpt-5-mini", "gpt-4.5"),
        ),
        ProviderSpec(
            "anthropic",
            "https://api.anthropic.com",
            endpoint="/v1/messages",
            adapter=ANTHROPIC,
            models=(
                "claude-opus-4-5-20250522",
                "claude-sonnet-4-5-20250929",
                "claude-haiku-4-5",
            ),
        ),
        ProviderSpec(
            "gemini",
            "https://generativelanguage.googleapis.com/v1beta/openai",
            models=("gemini-3-pro", "gemini-3-flash", "gemini-2.5-pro", "gemini-2.5-flash"),
        ),
        ProviderSpec(
            "mistral",
            "https://api.mistral.ai/v1",
            models=("mistral-large-latest", "codestral-latest", "mistral-small-latest"),
        ),
        ProviderSpec(
            "grok", "https://api.x.ai/v1", models=("grok-4-2", "grok-4-beta", "grok-4-1")
        ),
        ProviderSpec(
            "cohere",
            "https://api.cohere.com/v1",
            models=("command-r-plus-08-2024", "command-r-08-2024"),
        ),
        ProviderSpec(
            "perplexity",
            "https://api.perplexity.ai",
            models=("sonar-pro", "sonar", "sonar-small-online"),
        ),
        ProviderSpec(
            "openrouter",
            "https://openrouter.ai/api/v1",
            models=("anthropic/claude-opus-4-5", "openai/gpt-5.2", "google/gemini-3-pro"),
        ),
        # Domestic (CN)
        ProviderSpec(
            "deepseek",
            "https://api.deepseek.com/v1",
            models=("deepseek-chat", "deepseek-reasoner"),
        ),
        ProviderSpec(
            "moonshot",
            "https://api.moonshot.cn/v1",
            models=("kimi-k2", "moonshot-v1-128k", "moonshot-v1-32k"),
        ),
        ProviderSpec(
            "zhipu",
            "https://open.bigmodel.cn/api/paas/v4",
            models=("glm-4.7", "glm-4.6", "glm-4-flash"),
        ),
        # Baidu ERNIE uses a bare /completions endpoint
        ProviderSpec(
            "ernie",
            "https://aip.baidubce.com/rpc/2.0/ai_custom/v1/wenxinworkshop/chat",
            endpoint="/completions",
            models=("ernie-5-0-preview-1220", "ernie-4.0-turbo"),
        ),
        ProviderSpec(
            "qwen",
            "https://dashscope.aliyuncs.com/compatible-mode/v1",
            models=("qwen-3-plus", "qwen-2.5-plus", "qwen-turbo"),
        ),
        ProviderSpec(
            "minimax",
            "https://api.minimaxi.com/v1",
            models=("m2.5", "abab6.5s-chat", "abab6.5-chat"),
        ),
        ProviderSpec(
            "yi", "https://api.lingyiwanwu.com/v1", models=("yi-lightning", "yi-large")
        ),
        ProviderSpec(
            "doubao",
            "https://ark.cn-beijing.volces.com/api/v3",
            models=("doubao-seed-1-6-pro", "doubao-pro-256k"),
        ),
        # User-supplied endpoint only
        ProviderSpec("custom", None),
    ]
}


def get_provider(provider: str) -> Optional[ProviderSpec]:
    return PROVIDERS.get((provider or "").strip().lower())


def get_adapter(provider: str) -> ProviderAdapter:
    spec = get_provider(provider)
    return spec.adapter if spec is not None else OPENAI_COMPATIBLE


def suggested_models(provider: str) -> List[str]:
    spec = get_provider(provider)
    return list(spec.models) if spec is not None else []
