import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Type

from loguru import logger
from openai import OpenAI
from pydantic import BaseModel

from loopcoder.lctypes import LoopCoderArgs
from loopcoder.llm_types import LLMRequest, LLMResponse
from loopcoder.utils.http_utils import RetrySession


DEFAULT_OLLAMA_URL = "http://localhost:11434"


class ModelProviderError(Exception):
    """ 模型供应商调用失败, 统一对外暴露的唯一异常类型 """
    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider
        self.message = message


class ProviderConfig(BaseModel):
    provider: str = "openai"  # openai / ollama / gemini
    model_name: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None


class BaseLLMProvider(ABC):
    """
    模型文本生成端口
    - generate_text: 常规对话/Agent 调用
    - generate_completion: 短输出, 低温度, 用于代码补全
    """
    name = "base"
    text_temperature: Optional[float] = None
    completion_temperature: float = 0.1
    completion_max_tokens: int = 100

    def __init__(self, config: ProviderConfig):
        self.config = config

    def generate_text(self, prompt: str, system: Optional[str] = None) -> str:
        return self._call(prompt, system, temperature=self.text_temperature, max_tokens=None)

    def generate_completion(self, prompt: str, system: Optional[str] = None) -> str:
        return self._call(
            prompt, system, temperature=self.completion_temperature, max_tokens=self.completion_max_tokens)

    def _call(self, prompt: str, system: Optional[str], temperature: Optional[float],
              max_tokens: Optional[int]) -> str:
        logger.debug(f"模型调用: 供应商 {self.name}, 模型 {self.config.model_name}, 提示词长度 {len(prompt)}")
        try:
            response = self._generate(prompt, system, temperature=temperature, max_tokens=max_tokens)
        except ModelProviderError:
            raise
        except Exception as e:
            logger.error(f"{self.name} 调用失败: {e}")
            raise ModelProviderError(self.name, self._describe_error(e)) from e
        if not isinstance(response.output, str) or not response.output:
            raise ModelProviderError(self.name, f"{self.name} returned an empty response")
        return response.output

    def _describe_error(self, e: Exception) -> str:
        return f"{self.name} error: {e}"

    @staticmethod
    def _build_messages(prompt: str, system: Optional[str]) -> List[Dict[str, str]]:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})
        return messages

    @abstractmethod
    def _generate(self, prompt: str, system: Optional[str], temperature: Optional[float],
                  max_tokens: Optional[int]) -> LLMResponse:
        pass


class OpenAIProvider(BaseLLMProvider):
    """ OpenAI 及兼容 OpenAI 协议的云端接口 """
    name = "openai"
    text_temperature = 0.7

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.client = OpenAI(
            api_key=config.api_key or os.environ.get("OPENAI_API_KEY", ""),
            base_url=config.base_url
        )

    def _describe_error(self, e: Exception) -> str:
        return f"OpenAI Error: {e}"

    def _generate(self, prompt, system, temperature, max_tokens) -> LLMResponse:
        request = LLMRequest(
            model=self.config.model_name,
            messages=self._build_messages(prompt, system),
            temperature=temperature,
            max_tokens=max_tokens
        )
        res = self.client.chat.completions.create(**request.model_dump(exclude_none=True))
        return LLMResponse(
            output=res.choices[0].message.content or "",
            input=prompt,
            metadata={
                "id": res.id,
                "model": res.model,
                "created": res.created
            }
        )


class OllamaProvider(BaseLLMProvider):
    """ 本地 Ollama 模型服务 """
    name = "ollama"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.base_url = (config.base_url or DEFAULT_OLLAMA_URL).rstrip("/")
        self.http = RetrySession()

    def _generate(self, prompt, system, temperature, max_tokens) -> LLMResponse:
        options = {}
        if temperature is not None:
            options["temperature"] = temperature
        if max_tokens is not None:
            options["num_predict"] = max_tokens
        payload = {
            "model": self.config.model_name,
            "messages": self._build_messages(prompt, system),
            "stream": False
        }
        if options:
            payload["options"] = options

        res = self.http.post(f"{self.base_url}/api/chat", json=payload)
        if res is None:
            raise ModelProviderError(
                self.name, f"Failed to connect to Ollama at {self.base_url}. Ensure it's running.")
        data = res.json()
        return LLMResponse(
            output=data["message"]["content"],
            input=prompt,
            metadata={"model": data.get("model"), "created": data.get("created_at")}
        )


class GeminiProvider(BaseLLMProvider):
    """ Google Gemini 接口 """
    name = "gemini"

    def __init__(self, config: ProviderConfig):
        super().__init__(config)
        self.client = None
        api_key = config.api_key or os.environ.get("GEMINI_API_KEY")
        if api_key:
            from google import genai
            self.client = genai.Client(api_key=api_key)

    def _describe_error(self, e: Exception) -> str:
        return f"Gemini Error: {e}"

    def _generate(self, prompt, system, temperature, max_tokens) -> LLMResponse:
        if self.client is None:
            raise ModelProviderError(self.name, "Gemini API key not set.")
        from google.genai import types

        res = self.client.models.generate_content(
            model=self.config.model_name,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=system,
                temperature=temperature,
                max_output_tokens=max_tokens
            )
        )
        return LLMResponse(output=res.text or "", input=prompt, metadata={"model": self.config.model_name})


PROVIDER_MAP: Dict[str, Type[BaseLLMProvider]] = {
    "openai": OpenAIProvider,
    "ollama": OllamaProvider,
    "gemini": GeminiProvider
}


def create_provider(config: ProviderConfig) -> BaseLLMProvider:
    """ 每次按配置创建新的供应商实例, 不共享任何全局状态 """
    provider_cls = PROVIDER_MAP.get(config.provider)
    if provider_cls is None:
        raise ModelProviderError(config.provider, f"Unknown model provider: {config.provider}")
    logger.info(f"创建模型供应商: {config.provider}/{config.model_name}")
    return provider_cls(config)


def provider_config_from_args(args: LoopCoderArgs) -> ProviderConfig:
    return ProviderConfig(
        provider=args.provider or "openai",
        model_name=args.model or "",
        api_key=args.api_key,
        base_url=args.base_url
    )
