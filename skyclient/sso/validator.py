from __future__ import annotations

import re
from typing import Iterable, Optional


def is_allowed(url: Optional[str], allow_list: Iterable[str]) -> bool:
    """url 是否以 allow-list 中任一条目开头（大小写不敏感，首个命中即返回）。"""

    if not url:
        return False
    for entry in allow_list or ():
        # 空条目会匹配任何 url，直接跳过
        if not entry:
            continue
        if re.match(re.escape(entry), url, re.IGNORECASE):
            return True
    return False


__all__ = ["is_allowed"]
