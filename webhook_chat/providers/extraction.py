"""Webhook 响应 → 回复文本的提取规则。

响应没有固定 schema，可能是：

- 字符串：直接作为回复。
- 对象：依次探测 reply / message / text / answer / output / response / data。
- 数组：探测首元素的 reply，再探测首元素的 json.reply。

规则按声明顺序执行，第一个得到可用值的规则胜出。
"""

import json
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

CANDIDATE_KEYS: Tuple[str, ...] = ("reply", "message", "text", "answer", "output", "response", "data")


@dataclass(frozen=True)
class ReplyRule:
    """单条提取规则：name 用于日志，extract 返回候选值（可能不可用）。"""

    name: str
    extract: Callable[[Any], Any]


def _key(name: str) -> Callable[[Any], Any]:
    def extract(data: Any) -> Any:
        return data.get(name) if isinstance(data, dict) else None

    return extract


def _first_item(data: Any) -> Optional[dict]:
    if isinstance(data, list) and data and isinstance(data[0], dict):
        return data[0]
    return None


def _first_item_reply(data: Any) -> Any:
    item = _first_item(data)
    return item.get("reply") if item is not None else None


def _first_item_json_reply(data: Any) -> Any:
    item = _first_item(data)
    nested = item.get("json") if item is not None else None
    return nested.get("reply") if isinstance(nested, dict) else None


REPLY_RULES: Tuple[ReplyRule, ...] = tuple(ReplyRule(name=k, extract=_key(k)) for k in CANDIDATE_KEYS) + (
    ReplyRule(name="[0].reply", extract=_first_item_reply),
    ReplyRule(name="[0].json.reply", extract=_first_item_json_reply),
)


def is_usable(value: Any) -> bool:
    """None、False、空字符串/列表/对象、数值 0 与 NaN 视为不可用。"""

    if value is None or value is False:
        return False
    if isinstance(value, (str, list, dict)):
        return len(value) > 0
    if isinstance(value, float):
        return value != 0 and not math.isnan(value)
    if isinstance(value, int):
        return value != 0
    return True


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def match_rule(data: Any) -> Tuple[Optional[str], Optional[str]]:
    """返回 (规则名, 回复文本)；没有规则命中时返回 (None, None)。"""

    if isinstance(data, str):
        return ("string", data) if data else (None, None)
    for rule in REPLY_RULES:
        value = rule.extract(data)
        if is_usable(value):
            return rule.name, _as_text(value)
    return None, None


def extract_reply(data: Any) -> Optional[str]:
    """从任意 JSON 值中提取回复文本，找不到时返回 None。"""

    return match_rule(data)[1]
