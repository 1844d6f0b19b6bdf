# command_resolver.py - Exec命令与图标路径解析
import os
import re
import logging
from typing import Optional

from .platform_utils import PlatformUtils

logger = logging.getLogger(__name__)

# 字段代码：空格 + % + 一个字母，如 " %u"、" %F"
FIELD_CODE_PATTERN = re.compile(r" %[A-Za-z]")

def strip_field_code(command: str) -> str:
    """去掉首尾空白和第一个字段代码"""
    return FIELD_CODE_PATTERN.sub("", command.strip(), count=1)

def resolve_command(exec_command: Optional[str], platform_utils: PlatformUtils) -> Optional[str]:
    """把Exec命令解析为以绝对路径开头的可执行命令行

    解析失败（空命令、可执行文件不在PATH中）时返回 None，不回退到原始名称。
    连续空格不合并，空参数原样保留。
    """
    if not exec_command:
        return None

    tokens = strip_field_code(exec_command).split(" ")
    if not tokens or not tokens[0]:
        return None

    binary, args = tokens[0], tokens[1:]
    exe_path = platform_utils.find_executable(binary)
    if exe_path is None:
        logger.debug(f"无法解析命令: {exec_command}")
        return None

    return " ".join([str(exe_path)] + args)

def resolve_icon(icon: Optional[str]) -> str:
    """只支持绝对路径图标，主题名和相对路径返回空字符串"""
    if not icon:
        return ""
    if os.path.isabs(icon):
        return icon
    return ""
