from typing import Optional

import requests
from loguru import logger
from requests.adapters import HTTPAdapter
from urllib3 import Retry


class RetrySession:
    """ 带连接重试的 requests 会话, 请求失败时记录日志并返回 None """
    def __init__(
            self,
            total_retries=3,
            connect_retries=2,
            read_retries=0,
            status_forcelist=(502, 503, 504),
            backoff_factor=0.5,
            timeout: Optional[float] = 120):
        self.retry_strategy = Retry(
            total=total_retries,                 # 总共重试次数
            connect=connect_retries,             # 连接错误时重试次数
            read=read_retries,                   # 模型请求不做读取重试, 避免重复生成
            status_forcelist=status_forcelist,   # 对于这些 HTTP 状态码强制重试
            backoff_factor=backoff_factor,       # 等待时间因子：指数递增
            raise_on_status=False                # 达到最大重试次数后不抛异常, 交由 raise_for_status 处理
        )
        self.timeout = timeout
        self.session = requests.Session()
        self.mount_adapters()

    def mount_adapters(self):
        http_adapter = HTTPAdapter(max_retries=self.retry_strategy)
        self.session.mount('https://', http_adapter)
        self.session.mount('http://', http_adapter)

    def request(self, method, url, **kwargs) -> Optional[requests.Response]:
        kwargs.setdefault("timeout", self.timeout)
        try:
            _response = self.session.request(method, url, **kwargs)
            _response.raise_for_status()  # 如果响应状态码不是2xx，抛出HTTPError
            return _response
        except requests.exceptions.RetryError as e:
            logger.error(f"达到最大重试次数，重试失败: {e}")
        except requests.exceptions.RequestException as e:
            logger.error(f"请求失败: {method} {url}: {e}")
        return None

    def post(self, url, data=None, json=None, **kwargs):
        return self.request('POST', url, data=data, json=json, **kwargs)
