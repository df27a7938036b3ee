"""配置管理模块。

支持从 .env、config.yaml 以及环境变量加载配置。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict

import httpx
import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("WEBHOOK_CHAT_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
        Path(__file__).resolve().parents[1] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """配置设置（使用 Pydantic）。"""

    # ---- Webhook 相关配置 ----
    webhook_url: str = Field(default="", description="Webhook 接收地址，为空表示未配置")
    max_retries: int = Field(default=3, ge=0, description="首次请求失败后的最大重试次数")
    retry_delay_ms: int = Field(
        default=1000,
        ge=0,
        description="重试基础等待时间（毫秒），第 k 次重试前等待 retry_delay_ms * k",
    )
    http_timeout: float = Field(default=30.0, ge=1.0, description="HTTP 超时时间（秒）")

    # ---- 会话相关配置 ----
    message_max_length: int = Field(default=2000, ge=1, description="单条用户消息最大长度")
    storage_root: str = Field(default=".storage", description="会话与历史记录存储目录")
    user_avatar: str = Field(default="V", description="用户消息头像字母")
    bot_avatar: str = Field(default="M", description="机器人消息头像字母")
    error_notice: str = Field(
        default="Desculpe, ocorreu um erro. Por favor tente novamente.",
        description="投递失败后展示给用户的提示",
    )

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否脱敏日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: str) -> str:
        v = (v or "").strip()
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("webhook_url must start with http:// or https://")
        if v:
            try:
                httpx.URL(v)
            except httpx.InvalidURL as exc:
                raise ValueError(f"webhook_url is not a valid URL: {exc}")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
