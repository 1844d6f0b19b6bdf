# platform_utils.py - 平台检测与可执行文件查找
import os
import platform
import logging
from typing import List, Optional, Sequence, Tuple, Union
from pathlib import Path
from enum import Enum

from xdg import BaseDirectory

logger = logging.getLogger(__name__)

SUPPORTED_PLATFORMS: Tuple[str, ...] = ("linux",)

UNSUPPORTED_PLATFORM_MESSAGE = "Platform not yet supported"

class OperatingSystem(Enum):
    """操作系统枚举"""
    WINDOWS = "windows"
    LINUX = "linux"
    MACOS = "macos"
    UNKNOWN = "unknown"

class PlatformSupport(Enum):
    """平台支持状态"""
    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"

class UnsupportedPlatformError(Exception):
    """当前操作系统不在支持列表中"""

    def __init__(self, message: str = UNSUPPORTED_PLATFORM_MESSAGE):
        super().__init__(message)

class PlatformUtils:
    """平台工具类

    构造时检测一次操作系统，并与支持列表比对得出 ``support`` 状态。
    每次查询应新建实例，不在查询之间共享状态。
    """

    def __init__(self, supported_platforms: Sequence[str] = SUPPORTED_PLATFORMS):
        self.supported_platforms = tuple(supported_platforms)
        self.os_type = self._detect_os()
        self.support = self._check_support()

    def _detect_os(self) -> OperatingSystem:
        """检测操作系统类型"""
        system = platform.system().lower()

        if system == "windows":
            return OperatingSystem.WINDOWS
        elif system == "linux":
            return OperatingSystem.LINUX
        elif system == "darwin":
            return OperatingSystem.MACOS
        else:
            return OperatingSystem.UNKNOWN

    def _check_support(self) -> PlatformSupport:
        if self.os_type.value in self.supported_platforms:
            return PlatformSupport.SUPPORTED
        return PlatformSupport.UNSUPPORTED

    def is_supported(self) -> bool:
        return self.support == PlatformSupport.SUPPORTED

    def ensure_supported(self) -> OperatingSystem:
        """平台不受支持时抛出 UnsupportedPlatformError"""
        if not self.is_supported():
            logger.warning(f"不支持的平台: {self.os_type.value} (支持: {', '.join(self.supported_platforms)})")
            raise UnsupportedPlatformError()
        return self.os_type

    def get_data_dirs(self) -> List[Path]:
        """获取XDG数据目录（XDG_DATA_HOME在前，其后为XDG_DATA_DIRS）"""
        return [Path(d) for d in BaseDirectory.xdg_data_dirs if d]

    def is_executable(self, file_path: Union[str, Path]) -> bool:
        """检查文件是否可执行"""
        path = Path(file_path)

        if not path.is_file():
            return False

        return os.access(path, os.X_OK)

    def find_executable(self, name: str) -> Optional[Path]:
        """查找可执行文件，语义与shell查找命令一致"""
        if not name:
            return None

        # 含路径分隔符时不搜索PATH
        if os.sep in name:
            path = Path(os.path.abspath(name))
            if self.is_executable(path):
                return path
            return None

        for path_dir in os.environ.get("PATH", "").split(os.pathsep):
            # 空项表示当前目录
            exe_path = Path(os.path.abspath(os.path.join(path_dir or os.curdir, name)))
            if self.is_executable(exe_path):
                return exe_path

        logger.debug(f"在PATH中未找到可执行文件: {name}")
        return None
