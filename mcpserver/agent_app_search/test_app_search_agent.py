# test_app_search_agent.py - 应用搜索Agent测试
import io
import os
import json
import logging
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from mcpserver.agent_app_search import list_apps
from mcpserver.agent_app_search.app_search_agent import (
    ACTION,
    HELPER,
    KEYWORD,
    AppSearchAgent,
    create_app_search_agent,
    get_agent_dependencies,
    get_agent_metadata,
    package_logger,
    validate_agent_config,
)
from mcpserver.agent_app_search.app_scanner import DesktopAppScanner

ENTRIES = {
    "xterm.desktop": (
        "[Desktop Entry]\n"
        "Name=Terminal\n"
        "Comment=Terminal emulator\n"
        "Exec=xterm -fa Monospace\n"
        "Type=Application\n"
        "Icon=/usr/share/icons/app.png\n"
    ),
    "firefox.desktop": (
        "[Desktop Entry]\n"
        "Name=Firefox\n"
        "Comment=Browse the Web\n"
        "Exec=firefox %u\n"
        "Type=Application\n"
        "Icon=firefox\n"
    ),
    "htop.desktop": (
        "[Desktop Entry]\n"
        "Name=Htop\n"
        "Comment=Process viewer\n"
        "Exec=htop\n"
        "Type=Application\n"
        "Terminal=true\n"
    ),
}

def fake_find_executable(name):
    if name in ("xterm", "firefox", "htop"):
        return Path("/usr/bin") / name
    return None

class AgentTestCase(unittest.IsolatedAsyncioTestCase):
    """在临时应用目录上运行Agent"""

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)
        self.apps_dir = Path(self.tmp.name) / "applications"
        self.apps_dir.mkdir()
        for file_name, content in ENTRIES.items():
            (self.apps_dir / file_name).write_text(content, encoding='utf-8')

        patchers = [
            patch('mcpserver.agent_app_search.platform_utils.platform.system', return_value="Linux"),
            patch('mcpserver.agent_app_search.platform_utils.PlatformUtils.find_executable',
                  side_effect=fake_find_executable),
        ]
        for patcher in patchers:
            patcher.start()
            self.addCleanup(patcher.stop)

    def make_agent(self, **config) -> AppSearchAgent:
        config.setdefault("search_dirs", [str(self.apps_dir)])
        return AppSearchAgent(config)

class TestExecute(AgentTestCase):
    """测试查询执行"""

    async def test_empty_query_returns_all_sorted(self):
        result = await self.make_agent().execute("")

        self.assertEqual(result, {"items": [
            {
                "title": "Firefox",
                "subtitle": "Browse the Web",
                "arg": "/usr/bin/firefox"
            },
            {
                "title": "Terminal",
                "subtitle": "Terminal emulator",
                "arg": "/usr/bin/xterm -fa Monospace",
                "icon": "/usr/share/icons/app.png"
            },
        ]})

    async def test_query_filters(self):
        result = await self.make_agent().execute("TERM")
        self.assertEqual([item["title"] for item in result["items"]], ["Terminal"])

        result = await self.make_agent().execute("web")
        self.assertEqual([item["title"] for item in result["items"]], ["Firefox"])

    async def test_query_without_match(self):
        self.assertEqual(await self.make_agent().execute("photoshop"), {"items": []})

    async def test_none_query(self):
        result = await self.make_agent().execute(None)
        self.assertEqual(len(result["items"]), 2)

    async def test_terminal_apps_when_not_excluded(self):
        result = await self.make_agent(exclude_terminal_apps=False).execute("")
        self.assertEqual([item["title"] for item in result["items"]], ["Firefox", "Htop", "Terminal"])

    async def test_icons_disabled(self):
        result = await self.make_agent(resolve_icons=False).execute("terminal")
        self.assertNotIn("icon", result["items"][0])

    async def test_unsupported_platform(self):
        with patch('mcpserver.agent_app_search.platform_utils.platform.system', return_value="Windows"), \
                patch.object(DesktopAppScanner, "get_apps") as mock_get_apps:
            agent = self.make_agent()
            result = await agent.execute("term")

        self.assertEqual(result, {"item": "Error", "subtitle": "Platform not yet supported"})
        mock_get_apps.assert_not_called()
        self.assertEqual(agent.stats["failed_requests"], 1)
        self.assertEqual(agent.stats["last_error"], "Platform not yet supported")

    async def test_unexpected_error_becomes_error_item(self):
        with patch.object(DesktopAppScanner, "get_apps", side_effect=RuntimeError("disk on fire")):
            result = await self.make_agent().execute("x")

        self.assertEqual(result, {"item": "Error", "subtitle": "disk on fire"})

    async def test_missing_directory_gives_empty_items(self):
        agent = self.make_agent(search_dirs=[str(Path(self.tmp.name) / "missing")])
        self.assertEqual(await agent.execute(""), {"items": []})

    async def test_unreadable_directory_among_readable(self):
        agent = self.make_agent(search_dirs=[str(Path(self.tmp.name) / "missing"), str(self.apps_dir)])
        result = await agent.execute("")
        self.assertEqual(len(result["items"]), 2)

    async def test_results_not_cached_between_queries(self):
        agent = self.make_agent()
        self.assertEqual(len((await agent.execute(""))["items"]), 2)

        (self.apps_dir / "new.desktop").write_text(
            "[Desktop Entry]\nName=Another Terminal\nComment=New\nExec=xterm\nType=Application\n",
            encoding='utf-8'
        )
        self.assertEqual(len((await agent.execute(""))["items"]), 3)

    async def test_stats(self):
        agent = self.make_agent()
        await agent.execute("")
        with patch.object(DesktopAppScanner, "get_apps", side_effect=RuntimeError("boom")):
            await agent.execute("")

        stats = agent.get_stats()
        self.assertEqual(stats["total_requests"], 2)
        self.assertEqual(stats["successful_requests"], 1)
        self.assertEqual(stats["failed_requests"], 1)
        self.assertEqual(stats["last_error"], "boom")

class TestHandoff(AgentTestCase):
    """测试MCP handoff"""

    async def test_handoff_returns_json(self):
        response = json.loads(await self.make_agent().handle_handoff({"query": "fire"}))

        self.assertEqual(response, {"items": [
            {"title": "Firefox", "subtitle": "Browse the Web", "arg": "/usr/bin/firefox"}
        ]})

    async def test_handoff_without_query(self):
        response = json.loads(await self.make_agent().handle_handoff({}))
        self.assertEqual(len(response["items"]), 2)

    async def test_handoff_error_is_json(self):
        with patch.object(DesktopAppScanner, "get_apps", side_effect=ValueError("bad")):
            response = json.loads(await self.make_agent().handle_handoff({"query": ""}))

        self.assertEqual(response, {"item": "Error", "subtitle": "bad"})

class TestAgentMetadata(unittest.TestCase):
    """测试插件元数据与工厂函数"""

    def test_constants(self):
        self.assertEqual(KEYWORD, "app")
        self.assertEqual(ACTION, "openlocal")
        self.assertEqual(HELPER, {"title": "Search for local applications", "subtitle": "Example: app xterm"})

    def test_agent_attributes(self):
        agent = create_app_search_agent({"action": "openurl"})

        self.assertIsInstance(agent, AppSearchAgent)
        self.assertEqual(agent.keyword, "app")
        self.assertEqual(agent.action, "openurl")
        self.assertEqual(agent.helper, HELPER)
        self.assertTrue(agent.config["exclude_terminal_apps"])

    def test_metadata(self):
        metadata = get_agent_metadata()

        self.assertEqual(metadata["keyword"], KEYWORD)
        self.assertEqual(metadata["action"], ACTION)
        self.assertEqual(metadata["helper"], HELPER)
        self.assertEqual(metadata["entryPoint"]["class"], "AppSearchAgent")

    def test_validate_and_dependencies(self):
        self.assertTrue(validate_agent_config({"resolve_icons": False}))
        self.assertFalse(validate_agent_config({"resolve_icons": "no"}))
        self.assertEqual(get_agent_dependencies(), ["pyxdg"])

    def test_debug_log_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "debug.log")
            AppSearchAgent({"debug_mode": True, "log_file": log_file})
            AppSearchAgent({"debug_mode": True, "log_file": log_file})

            handlers = [h for h in package_logger.handlers if getattr(h, "baseFilename", None) == log_file]
            self.assertEqual(len(handlers), 1)
            for handler in handlers:
                package_logger.removeHandler(handler)
                handler.close()
            package_logger.setLevel(logging.NOTSET)

    def test_log_level_applies_to_package(self):
        self.addCleanup(package_logger.setLevel, logging.NOTSET)

        AppSearchAgent({"log_level": "DEBUG"})
        self.assertEqual(package_logger.level, logging.DEBUG)
        self.assertTrue(logging.getLogger("mcpserver.agent_app_search.app_scanner").isEnabledFor(logging.DEBUG))

        # 后创建的Agent覆盖之前的级别
        AppSearchAgent({"log_level": "WARNING"})
        self.assertEqual(package_logger.level, logging.WARNING)

    def test_invalid_config_falls_back_to_defaults(self):
        self.addCleanup(package_logger.setLevel, logging.NOTSET)

        agent = AppSearchAgent({"log_level": None})
        self.assertEqual(agent.config["log_level"], "INFO")
        self.assertEqual(package_logger.level, logging.INFO)

        agent = AppSearchAgent({"log_level": "LOUD"})
        self.assertEqual(agent.config["log_level"], "INFO")

class TestDebugLogging(AgentTestCase):
    """测试调试日志文件"""

    async def test_scanner_debug_lines_reach_log_file(self):
        (self.apps_dir / "bad.desktop").write_bytes(b"[Desktop Entry]\nName=\xff\xfe\n")
        log_file = os.path.join(self.tmp.name, "debug.log")

        agent = self.make_agent(debug_mode=True, log_level="DEBUG", log_file=log_file)
        handlers = [h for h in package_logger.handlers if getattr(h, "baseFilename", None) == log_file]
        for handler in handlers:
            self.addCleanup(handler.close)
            self.addCleanup(package_logger.removeHandler, handler)
        self.addCleanup(package_logger.setLevel, logging.NOTSET)

        result = await agent.execute("")
        self.assertEqual(len(result["items"]), 2)

        for handler in handlers:
            handler.flush()
        content = Path(log_file).read_text(encoding='utf-8')
        self.assertIn("读取desktop文件失败", content)
        self.assertIn("bad.desktop", content)
        self.assertIn("app_scanner.py", content)
        self.assertIn("扫描统计", content)

class TestListApps(AgentTestCase):
    """测试应用列表脚本"""

    def test_format_items(self):
        lines = list_apps.format_items({"items": [
            {"title": "Terminal", "subtitle": "Terminal emulator", "arg": "/usr/bin/xterm", "icon": "/i.png"},
            {"title": "Firefox", "subtitle": "Browse the Web", "arg": "/usr/bin/firefox"},
        ]})

        self.assertEqual(lines, [
            " 1. Terminal - Terminal emulator",
            "     命令: /usr/bin/xterm",
            "     图标: /i.png",
            " 2. Firefox - Browse the Web",
            "     命令: /usr/bin/firefox",
        ])

    def test_format_error(self):
        self.assertEqual(
            list_apps.format_items({"item": "Error", "subtitle": "Platform not yet supported"}),
            ["Error: Platform not yet supported"]
        )

    async def test_list_all_apps(self):
        agent = self.make_agent()
        out = io.StringIO()
        with patch.object(list_apps, "create_app_search_agent", return_value=agent), redirect_stdout(out):
            response = await list_apps.list_all_apps("fire")

        self.assertEqual([item["title"] for item in response["items"]], ["Firefox"])
        self.assertIn("总计: 1 个应用", out.getvalue())
        self.assertIn("Firefox - Browse the Web", out.getvalue())

if __name__ == '__main__':
    unittest.main()
