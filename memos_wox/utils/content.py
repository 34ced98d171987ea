"""
Content utilities - 内容处理工具
纯函数：提取 / 移除标签、生成标题、格式化时间。不做任何 I/O。
"""

import re
from datetime import datetime, timezone
from typing import List, Optional

from ..core.config import TITLE_ELLIPSIS, TITLE_MAX_LENGTH, TITLE_TRUNCATE_AT

# 标签：# 后跟一个或多个单词字符或中日韩汉字
TAG_PATTERN = re.compile(r'#([\w\u3400-\u4dbf\u4e00-\u9fff]+)')
_WHITESPACE = re.compile(r'\s+')
# Memos 的时间戳可能带纳秒；旧版本 fromisoformat 只接受 3 位或 6 位小数
_FRACTION = re.compile(r"\.(\d+)")

TIMESTAMP_FORMAT = "%Y/%m/%d %H:%M"


def extract_tags(content: str) -> List[str]:
    """提取标签 - 支持中英文标签，去重并保留首次出现的顺序"""
    tags = []
    for tag in TAG_PATTERN.findall(content or ""):
        if tag not in tags:
            tags.append(tag)
    return tags


def remove_tags(content: str) -> str:
    """移除标签并压缩空白"""
    stripped = TAG_PATTERN.sub('', content or "")
    return _WHITESPACE.sub(' ', stripped).strip()


def derive_title(content: str) -> str:
    title = remove_tags(content)
    if len(title) > TITLE_MAX_LENGTH:
        return title[:TITLE_TRUNCATE_AT] + TITLE_ELLIPSIS
    return title


def parse_timestamp(value: str) -> datetime:
    text = value.strip()
    # 旧版本 Memos 的 createdTs 是 Unix 秒
    if text.isdigit():
        return datetime.fromtimestamp(int(text), tz=timezone.utc)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(_FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1))


def format_timestamp(primary: Optional[str], fallback: Optional[str] = None) -> str:
    """
    格式化创建时间。
    优先使用 primary，为空时使用 fallback；转换为本地时间后输出 YYYY/MM/DD HH:MM。
    任何解析失败都返回空字符串。
    """
    value = primary or fallback
    if not value:
        return ""
    try:
        return parse_timestamp(str(value)).astimezone().strftime(TIMESTAMP_FORMAT)
    except (ValueError, TypeError, OverflowError, OSError):
        return ""
