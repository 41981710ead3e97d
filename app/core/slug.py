import random
import re
import threading
import time
import unicodedata
from typing import Optional

from pypinyin import Style, lazy_pinyin

# 无法生成有效 slug 时的默认值
DEFAULT_SLUG = "untitled"
# slug 最大长度，避免 URL 过长
MAX_SLUG_LENGTH = 100

_WHITESPACE = re.compile(r"[\s_]")
_NON_SLUG = re.compile(r"[^a-z0-9-]")
_MULTIPLE_HYPHENS = re.compile(r"-{2,}")
_VALID_SLUG = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

_ts_lock = threading.Lock()
_last_ts = 0


def _to_pinyin(text: str) -> str:
    """汉字转不带声调的小写拼音（ü 写作 v），非汉字原样保留"""
    return "".join(lazy_pinyin(text, style=Style.NORMAL))


def _strip_accents(text: str) -> str:
    """NFD 分解后去掉组合附加符号，例如 résumé -> resume"""
    decomposed = unicodedata.normalize("NFD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def _truncate(slug: str, max_length: int) -> str:
    """截断到 max_length，尽量不把单词截成半截"""
    if len(slug) <= max_length:
        return slug
    slug = slug[:max_length]
    if slug.endswith("-"):
        slug = slug[:-1]
    elif "-" in slug:
        last = slug.rfind("-")
        # 最后 10 个字符内有连字符时回退到它
        if len(slug) - last < 10:
            slug = slug[:last]
    return slug.strip("-")


def generate_slug(text: Optional[str]) -> str:
    """
    根据标题生成 slug（纯函数，同样的输入永远得到同样的结果）：
    1. 去首尾空白并转小写
    2. 汉字转拼音
    3. 去掉变音符号
    4. 空白和下划线替换为连字符
    5. 去掉字母、数字、连字符以外的字符
    6. 合并连续连字符，去掉首尾连字符
    7. 结果为空时返回 untitled
    8. 超长时截断
    """
    if text is None or not text.strip():
        return DEFAULT_SLUG

    slug = text.strip().lower()
    slug = _to_pinyin(slug)
    slug = _strip_accents(slug).lower()
    slug = _WHITESPACE.sub("-", slug)
    slug = _NON_SLUG.sub("", slug)
    slug = _MULTIPLE_HYPHENS.sub("-", slug)
    slug = slug.strip("-")

    if not slug:
        return DEFAULT_SLUG

    slug = _truncate(slug, MAX_SLUG_LENGTH)
    return slug or DEFAULT_SLUG


def _unique_millis() -> int:
    """毫秒时间戳，同一进程内严格递增"""
    global _last_ts
    with _ts_lock:
        now = int(time.time() * 1000)
        if now <= _last_ts:
            now = _last_ts + 1
        _last_ts = now
        return now


def _with_suffix(text: Optional[str], suffix: str) -> str:
    base = _truncate(generate_slug(text), MAX_SLUG_LENGTH - len(suffix) - 1) or DEFAULT_SLUG
    return f"{base}-{suffix}"


def generate_unique_slug(text: Optional[str]) -> str:
    """带毫秒时间戳后缀的唯一 slug，总长度不超过 MAX_SLUG_LENGTH"""
    return _with_suffix(text, str(_unique_millis()))


def generate_slug_with_random(text: Optional[str]) -> str:
    """带 4 位随机数后缀的 slug（0000-9999）"""
    return _with_suffix(text, f"{random.randint(0, 9999):04d}")


def is_valid_slug(slug: Optional[str]) -> bool:
    """只含小写字母、数字和单个连字符，不以连字符开头结尾，长度不超限"""
    if slug is None or not slug.strip():
        return False
    return bool(_VALID_SLUG.fullmatch(slug)) and len(slug) <= MAX_SLUG_LENGTH


def clean_slug(slug: Optional[str]) -> str:
    """把不规范的旧 slug 重新规范化"""
    return generate_slug(slug)
