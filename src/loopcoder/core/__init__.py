from loopcoder.core.llm_prompt import prompt, extract_code, format_str_jinja2
from loopcoder.core.llm_client import (
    BaseLLMProvider, OpenAIProvider, OllamaProvider, GeminiProvider,
    ProviderConfig, ModelProviderError, create_provider, provider_config_from_args)


__all__ = [
    "prompt", "extract_code", "format_str_jinja2",
    "BaseLLMProvider", "OpenAIProvider", "OllamaProvider", "GeminiProvider",
    "ProviderConfig", "ModelProviderError", "create_provider", "provider_config_from_args"
]
