# app_search_agent.py - 本地应用搜索Agent
import os
import json
import logging
import traceback
from datetime import datetime
from typing import Any, Dict, List, Optional

from .agent_config import get_default_config, load_config, merge_config, validate_config
from .app_filter import filter_apps
from .app_scanner import ApplicationRecord, DesktopAppScanner
from .platform_utils import PlatformUtils, UnsupportedPlatformError

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
)
logger = logging.getLogger(__name__)
# 整个包共用的日志器，级别和文件处理器作用于本进程内所有Agent
package_logger = logging.getLogger(__package__)

# 插件元数据（静态）
KEYWORD = "app"
ACTION = "openlocal"
HELPER = {
    "title": "Search for local applications",
    "subtitle": "Example: app xterm"
}

ERROR_ITEM = "Error"

class AppSearchAgent:
    """本地应用搜索Agent - 按查询返回已安装的desktop应用"""

    name = "App Search Agent"
    version = "1.0.0"

    def __init__(self, config: Dict = None):
        """初始化Agent"""
        self.config = merge_config(config) if config is not None else load_config()
        if not validate_config(self.config):
            logger.warning("Agent配置无效，使用默认配置")
            self.config = get_default_config()
        self.keyword = KEYWORD
        self.action = self.config.get("action", ACTION)
        self.helper = dict(HELPER)
        self.stats = {
            "total_requests": 0,
            "successful_requests": 0,
            "failed_requests": 0,
            "last_error": None,
            "startup_time": datetime.now()
        }

        self._setup_logging()

        logger.info(f"{self.name} v{self.version} 初始化完成")

    def _setup_logging(self) -> None:
        """设置日志配置

        级别和调试文件设置在包日志器上，扫描器等子模块的日志一并生效；
        包日志器是进程级的，最后创建的Agent的设置会覆盖之前的。
        """
        log_level = getattr(logging, str(self.config.get("log_level") or "INFO").upper(), logging.INFO)
        package_logger.setLevel(log_level)

        if self.config.get("debug_mode"):
            log_file = self.config.get("log_file") or os.path.join(os.path.dirname(__file__), "debug.log")
            log_file = os.path.abspath(log_file)
            for handler in package_logger.handlers:
                if isinstance(handler, logging.FileHandler) and handler.baseFilename == log_file:
                    return
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
            )
            file_handler.setFormatter(formatter)
            package_logger.addHandler(file_handler)

    async def execute(self, query: Optional[str]) -> Dict[str, Any]:
        """执行查询

        总是返回格式正确的响应：成功时为 {"items": [...]}，
        失败时为单个错误条目 {"item": "Error", "subtitle": 错误信息}。
        """
        self.stats["total_requests"] += 1
        query = query or ""
        logger.info(f"📥 收到查询: {query!r}")

        try:
            apps = await self._search(query)
            items = [self._to_item(app) for app in apps]
            self.stats["successful_requests"] += 1
            logger.info(f"查询 {query!r} 匹配 {len(items)} 个应用")
            return {"items": items}

        except UnsupportedPlatformError as e:
            return self._create_error_response(str(e))

        except Exception as e:
            logger.error(f"❌ 处理查询失败 [{query!r}]: {e}")
            logger.debug(traceback.format_exc())
            return self._create_error_response(str(e))

    async def _search(self, query: str) -> List[ApplicationRecord]:
        """平台检查 → 扫描 → 过滤"""
        platform_utils = PlatformUtils(self.config["supported_platforms"])
        platform_utils.ensure_supported()

        scanner = DesktopAppScanner(self.config, platform_utils)
        apps = await scanner.get_apps()
        return filter_apps(apps, query)

    def _to_item(self, app: ApplicationRecord) -> Dict[str, str]:
        """把应用记录转换为结果条目"""
        item = {
            "title": app.name,
            "subtitle": app.description,
            "arg": app.resolved_command
        }
        if app.icon_path:
            item["icon"] = app.icon_path
        return item

    def _create_error_response(self, message: str) -> Dict[str, str]:
        """创建错误响应"""
        self.stats["failed_requests"] += 1
        self.stats["last_error"] = message
        return {"item": ERROR_ITEM, "subtitle": message}

    async def handle_handoff(self, data: Dict) -> str:
        """处理MCP handoff请求"""
        query = data.get("query", "") if isinstance(data, dict) else ""
        result = await self.execute(query)
        return json.dumps(result, ensure_ascii=False)

    def get_stats(self) -> Dict:
        """获取统计信息"""
        return self.stats.copy()

# 工厂函数
def create_app_search_agent(config: Dict = None) -> AppSearchAgent:
    """创建应用搜索Agent实例"""
    return AppSearchAgent(config)

# 导出函数
def get_agent_metadata() -> Dict:
    """获取Agent元数据"""
    return {
        "name": "本地应用搜索服务",
        "displayName": "App Search Service",
        "version": AppSearchAgent.version,
        "description": "扫描XDG desktop文件，按名称或描述搜索本地应用",
        "agentType": "mcp",
        "keyword": KEYWORD,
        "action": ACTION,
        "helper": dict(HELPER),
        "entryPoint": {
            "module": "mcpserver.agent_app_search.app_search_agent",
            "class": "AppSearchAgent"
        },
        "factory": {
            "create_instance": "create_app_search_agent",
            "validate_config": "validate_agent_config",
            "get_dependencies": "get_agent_dependencies"
        }
    }

def validate_agent_config(config: Dict) -> bool:
    """验证Agent配置"""
    return validate_config(config)

def get_agent_dependencies() -> List[str]:
    """获取Agent依赖"""
    return [
        "pyxdg"
    ]
