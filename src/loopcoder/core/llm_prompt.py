import functools
import inspect
import re
from typing import Any, Callable

from jinja2 import Template


def format_str_jinja2(s: str, **kargs: Any) -> str:
    """ 使用 jinja2 渲染提示词模板 """
    return Template(s).render(**kargs)


class _PromptWrapper:
    """
    被 @prompt() 装饰后的对象
    - 直接调用: 执行原函数
    - .prompt(...): 以 docstring 为 jinja2 模板渲染, 函数参数与函数返回的 dict 作为模板变量
    """

    def __init__(self, func: Callable[..., Any], instance: Any = None):
        self._func = func
        self._instance = instance
        self._template = inspect.getdoc(func) or ""
        self._signature = inspect.signature(func)
        functools.update_wrapper(self, func)

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return _PromptWrapper(self._func, instance)

    def _args(self, args):
        return (self._instance,) + args if self._instance is not None else args

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self._func(*self._args(args), **kwargs)

    def prompt(self, *args: Any, **kwargs: Any) -> str:
        full_args = self._args(args)
        bound = self._signature.bind(*full_args, **kwargs)
        bound.apply_defaults()
        context = dict(bound.arguments)
        context.pop("self", None)
        extra = self._func(*full_args, **kwargs)
        if isinstance(extra, dict):
            context.update(extra)
        return format_str_jinja2(self._template, **context).strip()


def prompt():
    def _decorator(func: Callable[..., Any]) -> _PromptWrapper:
        return _PromptWrapper(func)
    return _decorator


_CODE_BLOCK_RE = re.compile(r"```[\w+-]*\n([\s\S]*?)```")


def extract_code(response: str) -> str:
    """ 提取回复中的第一个代码块, 没有代码块时返回去除首尾空白的原文 """
    match = _CODE_BLOCK_RE.search(response)
    return match.group(1).strip() if match else response.strip()
