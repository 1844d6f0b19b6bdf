# agent_config.py - 应用搜索Agent配置
import os
import logging
from typing import Any, Dict, Optional

from .platform_utils import SUPPORTED_PLATFORMS

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "config.env"

DEFAULT_CONFIG: Dict[str, Any] = {
    # 平台与目录
    "supported_platforms": SUPPORTED_PLATFORMS,
    "applications_subdir": "applications",
    "desktop_file_extension": ".desktop",
    "search_dirs": None,  # None 表示使用XDG数据目录
    # 结果策略
    "exclude_terminal_apps": True,
    "resolve_icons": True,
    "action": "openlocal",
    # 日志
    "debug_mode": False,
    "log_level": "INFO",
    "log_file": None,
}

def get_default_config() -> Dict[str, Any]:
    """获取默认配置的副本"""
    return dict(DEFAULT_CONFIG)

def merge_config(overrides: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """把给定配置合并到默认配置之上"""
    config = get_default_config()
    if overrides:
        config.update(overrides)
    return config

def _convert_value(key: str, value: str) -> Any:
    """按默认值类型转换配置值"""
    default = DEFAULT_CONFIG.get(key)

    if isinstance(default, tuple) or key == "search_dirs":
        items = tuple(item.strip() for item in value.split(",") if item.strip())
        return list(items) if key == "search_dirs" else items
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if value.isdigit():
        return int(value)
    return value

def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """加载配置

    读取 KEY=value 格式的 config.env（默认位于模块目录），与默认配置合并。
    文件不存在时直接使用默认配置。
    """
    if config_path is None:
        config_path = os.path.join(os.path.dirname(__file__), CONFIG_FILE_NAME)
    config: Dict[str, Any] = {}

    try:
        if os.path.exists(config_path):
            with open(config_path, 'r', encoding='utf-8') as f:
                for line in f:
                    line = line.strip()
                    if not line or line.startswith('#') or '=' not in line:
                        continue
                    key, value = line.split('=', 1)
                    key = key.strip().lower()
                    config[key] = _convert_value(key, value.strip())
            logger.debug(f"已加载配置文件: {config_path}")
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"加载配置文件失败: {e}")
        config = {}

    return merge_config(config)

def validate_config(config: Dict[str, Any]) -> bool:
    """验证配置"""
    if not isinstance(config, dict):
        return False

    checks = {
        "supported_platforms": (tuple, list),
        "applications_subdir": str,
        "desktop_file_extension": str,
        "exclude_terminal_apps": bool,
        "resolve_icons": bool,
        "action": str,
        "debug_mode": bool,
        "log_level": str,
    }
    for key, expected in checks.items():
        if key in config and not isinstance(config[key], expected):
            logger.warning(f"配置项类型错误: {key}={config[key]!r}")
            return False

    search_dirs = config.get("search_dirs")
    if search_dirs is not None and not isinstance(search_dirs, (list, tuple)):
        logger.warning(f"配置项类型错误: search_dirs={search_dirs!r}")
        return False

    log_level = config.get("log_level")
    if log_level is not None and not isinstance(logging.getLevelName(log_level.upper()), int):
        logger.warning(f"未知的日志级别: {log_level}")
        return False

    return True
