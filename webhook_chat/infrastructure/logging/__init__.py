"""JSON 行格式的文件日志。"""

from webhook_chat.infrastructure.logging.logger import logger

__all__ = ["logger"]
