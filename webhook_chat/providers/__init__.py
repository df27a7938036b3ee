"""回复客户端集成层。

该包下的模块负责：
- 定义客户端抽象接口 (base)。
- 响应 JSON → 回复文本的提取规则 (extraction)。
- 基于 HTTP webhook 的具体实现 (webhook_client)。
"""

from typing import Callable, Optional

from webhook_chat.config.settings import settings
from webhook_chat.providers.base import ReplyClient
from webhook_chat.providers.webhook_client import WebhookClient


def create_client(sleep: Optional[Callable[[float], None]] = None) -> ReplyClient:
    """根据当前配置创建回复客户端。"""

    return WebhookClient(settings, sleep=sleep)
