from typing import List

import pytest

from loopcoder.core import BaseLLMProvider, ProviderConfig
from loopcoder.host import LocalHost
from loopcoder.lctypes import LoopCoderArgs
from loopcoder.llm_types import LLMResponse


class ScriptedProvider(BaseLLMProvider):
    """ 按顺序返回预设回复的模型, 预设项为异常时抛出 """
    name = "scripted"

    def __init__(self, replies: List):
        super().__init__(ProviderConfig(provider="scripted", model_name="scripted-model"))
        self.replies = list(replies)
        self.calls = []

    def _generate(self, prompt, system, temperature, max_tokens) -> LLMResponse:
        self.calls.append({"prompt": prompt, "system": system, "temperature": temperature, "max_tokens": max_tokens})
        if not self.replies:
            raise AssertionError("no scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return LLMResponse(output=reply, input=prompt)


class RecordingHost(LocalHost):
    """ 记录预览请求, 不真正打开浏览器 """

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.previews = []

    def open_preview(self, url: str) -> None:
        self.previews.append(url)


@pytest.fixture
def host():
    return RecordingHost(command_timeout=30)


@pytest.fixture
def args(tmp_path):
    return LoopCoderArgs(source_dir=str(tmp_path))


@pytest.fixture
def make_provider():
    return ScriptedProvider
