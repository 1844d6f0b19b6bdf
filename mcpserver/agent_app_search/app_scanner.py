# app_scanner.py - XDG desktop应用扫描器
import os
import asyncio
import time
import logging
from typing import Any, Dict, List, Optional, Sequence, Union
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from .agent_config import merge_config
from .command_resolver import resolve_command, resolve_icon
from .desktop_entry import parse_desktop_entry
from .platform_utils import PlatformUtils

logger = logging.getLogger(__name__)

APPLICATION_TYPE = "Application"

@dataclass
class ApplicationRecord:
    """应用记录"""
    name: str
    description: str
    exec_command: str
    resolved_command: Optional[str] = None
    entry_type: str = ""
    is_terminal_app: bool = False
    icon_path: str = ""
    desktop_file: Optional[str] = None

    def is_valid(self, exclude_terminal_apps: bool = True) -> bool:
        """是否属于可搜索集合"""
        if not (self.name and self.description and self.resolved_command):
            return False
        if self.entry_type != APPLICATION_TYPE:
            return False
        if exclude_terminal_apps and self.is_terminal_app:
            return False
        return True

class ScanStatus(Enum):
    """目录扫描状态"""
    OK = "ok"
    UNREADABLE = "unreadable"  # 目录无法列出
    FAILED = "failed"  # 扫描过程中出现意外错误

@dataclass
class DirectoryScan:
    """单个目录的扫描结果"""
    directory: Path
    status: ScanStatus
    records: List[ApplicationRecord] = field(default_factory=list)
    error_count: int = 0

class DesktopAppScanner:
    """desktop应用扫描器

    并行扫描所有搜索目录，目录内的文件也并行读取解析；
    单个目录或文件失败只影响它自己的结果。
    """

    def __init__(self, config: Dict[str, Any] = None, platform_utils: PlatformUtils = None,
                 search_dirs: Sequence[Union[str, Path]] = None):
        self.config = merge_config(config)
        self.platform = platform_utils or PlatformUtils(self.config["supported_platforms"])
        if search_dirs is None:
            search_dirs = self.config.get("search_dirs")
        self._search_dirs = [Path(d) for d in search_dirs] if search_dirs is not None else None
        self._scan_stats = {
            "total_scanned": 0,
            "valid_count": 0,
            "invalid_count": 0,
            "duplicate_count": 0,
            "unreadable_dirs": 0,
            "error_count": 0,
            "scan_duration": 0
        }

    def get_search_dirs(self) -> List[Path]:
        """获取搜索目录：每个XDG数据目录下的 applications 子目录"""
        if self._search_dirs is not None:
            return list(self._search_dirs)
        subdir = self.config["applications_subdir"]
        return [data_dir / subdir for data_dir in self.platform.get_data_dirs()]

    def _is_desktop_file(self, file_name: str) -> bool:
        return file_name.lower().endswith(self.config["desktop_file_extension"].lower())

    def _load_desktop_file(self, desktop_path: Path) -> Optional[ApplicationRecord]:
        """读取并解析单个desktop文件（在线程池中运行），读取失败时抛出异常"""
        content = desktop_path.read_text(encoding='utf-8-sig')

        entry = parse_desktop_entry(content)
        if entry is None:
            return None

        icon_path = resolve_icon(entry.icon) if self.config["resolve_icons"] else ""

        return ApplicationRecord(
            name=entry.name,
            description=entry.comment,
            exec_command=entry.exec_command,
            resolved_command=resolve_command(entry.exec_command, self.platform),
            entry_type=entry.type,
            is_terminal_app=entry.terminal,
            icon_path=icon_path,
            desktop_file=str(desktop_path)
        )

    async def scan_directory(self, directory: Union[str, Path]) -> DirectoryScan:
        """扫描单个目录"""
        directory = Path(directory)
        loop = asyncio.get_running_loop()

        try:
            file_names = await loop.run_in_executor(None, os.listdir, directory)
        except OSError as e:
            logger.debug(f"无法读取目录 {directory}: {e}")
            return DirectoryScan(directory, ScanStatus.UNREADABLE)

        desktop_files = [directory / name for name in sorted(file_names) if self._is_desktop_file(name)]

        results = await asyncio.gather(
            *(loop.run_in_executor(None, self._load_desktop_file, path) for path in desktop_files),
            return_exceptions=True
        )

        scan = DirectoryScan(directory, ScanStatus.OK)
        for path, result in zip(desktop_files, results):
            if isinstance(result, Exception):
                logger.debug(f"读取desktop文件失败 {path}: {result}")
                scan.error_count += 1
            elif result is not None:
                scan.records.append(result)

        logger.debug(f"目录 {directory}: {len(scan.records)} 个条目, {scan.error_count} 个错误")
        return scan

    async def scan_all_directories(self) -> List[DirectoryScan]:
        """并行扫描所有搜索目录，结果顺序与目录顺序一致"""
        search_dirs = self.get_search_dirs()
        results = await asyncio.gather(
            *(self.scan_directory(d) for d in search_dirs),
            return_exceptions=True
        )

        scans = []
        for directory, result in zip(search_dirs, results):
            if isinstance(result, Exception):
                logger.error(f"扫描目录失败 {directory}: {result}")
                scans.append(DirectoryScan(directory, ScanStatus.FAILED))
            else:
                scans.append(result)
        return scans

    async def get_apps(self) -> List[ApplicationRecord]:
        """获取应用列表：展开、过滤无效条目、按名称去重并排序"""
        start_time = time.time()
        logger.info(f"🔍 开始扫描 {self.platform.os_type.value} 系统应用...")

        scans = await self.scan_all_directories()

        apps = [record for scan in scans for record in scan.records]
        unique_apps = self._process_and_deduplicate(apps)

        self._scan_stats["total_scanned"] = len(apps)
        self._scan_stats["unreadable_dirs"] = sum(1 for s in scans if s.status != ScanStatus.OK)
        self._scan_stats["error_count"] = sum(s.error_count for s in scans)
        self._scan_stats["scan_duration"] = time.time() - start_time
        self._update_scan_stats()

        return unique_apps

    def _process_and_deduplicate(self, apps: List[ApplicationRecord]) -> List[ApplicationRecord]:
        """过滤、去重（先出现者保留）并按名称排序"""
        exclude_terminal = self.config["exclude_terminal_apps"]
        unique_apps: Dict[str, ApplicationRecord] = {}
        invalid_count = 0
        duplicate_count = 0

        for app in apps:
            if not app.is_valid(exclude_terminal):
                invalid_count += 1
                continue
            if app.name in unique_apps:
                duplicate_count += 1
                continue
            unique_apps[app.name] = app

        self._scan_stats["valid_count"] = len(unique_apps)
        self._scan_stats["invalid_count"] = invalid_count
        self._scan_stats["duplicate_count"] = duplicate_count

        return sorted(unique_apps.values(), key=lambda app: app.name)

    def _update_scan_stats(self) -> None:
        """输出扫描统计"""
        logger.info(
            f"扫描统计: 总计={self._scan_stats['total_scanned']}, "
            f"有效={self._scan_stats['valid_count']}, "
            f"无效={self._scan_stats['invalid_count']}, "
            f"重复={self._scan_stats['duplicate_count']}, "
            f"不可读目录={self._scan_stats['unreadable_dirs']}, "
            f"错误={self._scan_stats['error_count']}, "
            f"耗时={self._scan_stats['scan_duration']:.2f}s"
        )

    def get_scan_stats(self) -> Dict:
        """获取扫描统计信息"""
        return self._scan_stats.copy()
