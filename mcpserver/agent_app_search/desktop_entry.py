# desktop_entry.py - .desktop文件解析
import configparser
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DESKTOP_ENTRY_SECTION = "Desktop Entry"

# 只读取这几个键，本地化键（如 Name[de]）忽略
DESKTOP_ENTRY_FIELDS: Tuple[str, ...] = ("Name", "Comment", "Exec", "Type", "Terminal", "Icon")

@dataclass(frozen=True)
class DesktopEntryFields:
    """[Desktop Entry] 段中识别出的字段，缺失字段为空字符串"""
    name: str = ""
    comment: str = ""
    exec_command: str = ""
    type: str = ""
    terminal: bool = False
    icon: str = ""

def _new_parser() -> configparser.ConfigParser:
    parser = configparser.ConfigParser(
        interpolation=None,
        strict=False,
        delimiters=("=",),
        comment_prefixes=("#",),
    )
    # 保留键的大小写
    parser.optionxform = str
    return parser

def parse_desktop_entry(content: str,
                        fields: Sequence[str] = DESKTOP_ENTRY_FIELDS) -> Optional[DesktopEntryFields]:
    """解析.desktop文件内容

    没有 [Desktop Entry] 段时返回 None（不是应用条目，不算错误）。
    内容格式错误时不抛异常，返回全部为空的字段。
    """
    parser = _new_parser()
    try:
        parser.read_string(content)
    except configparser.Error as e:
        logger.debug(f"desktop文件格式错误: {e}")
        return DesktopEntryFields()

    if not parser.has_section(DESKTOP_ENTRY_SECTION):
        return None

    section = parser[DESKTOP_ENTRY_SECTION]
    values: Dict[str, str] = {key: section.get(key, "") for key in fields}

    return DesktopEntryFields(
        name=values.get("Name", ""),
        comment=values.get("Comment", ""),
        exec_command=values.get("Exec", ""),
        type=values.get("Type", ""),
        terminal=values.get("Terminal", "") == "true",
        icon=values.get("Icon", ""),
    )
