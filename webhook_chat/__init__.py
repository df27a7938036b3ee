"""Webhook Chat 顶层包。

该包实现一个把用户消息转发到远端 webhook 并渲染回复的聊天核心，
包括配置加载、领域模型、回复格式化、带重试的 webhook 客户端、
投递状态机、会话编排与持久化存储等能力。
"""

from webhook_chat.formatting import format_message
from webhook_chat.providers.webhook_client import WebhookClient

__all__ = ["format_message", "WebhookClient"]
