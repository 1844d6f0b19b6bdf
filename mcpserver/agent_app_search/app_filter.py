# app_filter.py - 应用查询过滤
from typing import Iterable, List, Optional

from .app_scanner import ApplicationRecord

def matches_query(app: ApplicationRecord, query: Optional[str]) -> bool:
    """名称或描述包含查询字符串（忽略大小写，按字面匹配）"""
    if not query:
        return True
    needle = query.casefold()
    return needle in app.name.casefold() or needle in app.description.casefold()

def filter_apps(apps: Iterable[ApplicationRecord], query: Optional[str]) -> List[ApplicationRecord]:
    """按查询过滤应用，保持原有顺序；空查询返回全部"""
    return [app for app in apps if matches_query(app, query)]
