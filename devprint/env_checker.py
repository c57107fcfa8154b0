"""环境检测模块"""

from __future__ import annotations

import platform
import subprocess
import sys
from typing import Dict, List, Optional, Sequence, Tuple

import psutil

from .config_loader import Settings
from .ui import print_error, print_info, print_success, print_warning


class EnvironmentChecker:
    """检测本机可提供哪些指纹子系统"""

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or Settings()
        self.checks: List[Tuple[str, bool, Optional[str]]] = []

    def check_python_version(self, min_version: Tuple[int, int] = (3, 9)) -> bool:
        """检查 Python 版本"""
        current = sys.version_info[:2]
        version_str = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"

        if current >= min_version:
            self.checks.append(("Python", True, f"Python {version_str}"))
            return True
        msg = f"Python {version_str} (requires >= {min_version[0]}.{min_version[1]})"
        self.checks.append(("Python", False, msg))
        return False

    def check_system_info(self) -> Dict[str, str]:
        """获取系统信息"""
        info = {
            "system": platform.system(),
            "release": platform.release(),
            "machine": platform.machine(),
        }
        self.checks.append(("System", True, f"{info['system']} {info['release']} {info['machine']}"))
        return info

    def check_processor_count(self) -> bool:
        """检查逻辑处理器数量"""
        count = psutil.cpu_count(logical=True)
        if count:
            self.checks.append(("Processors", True, f"{count} logical"))
            return True
        self.checks.append(("Processors", False, "not reported (signal will be N/A)"))
        return False

    def check_tool(self, label: str, command: Sequence[str]) -> bool:
        """检查外部命令是否可用"""
        try:
            result = subprocess.run(
                list(command),
                capture_output=True,
                text=True,
                timeout=10,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            self.checks.append((label, False, f"{command[0]} unavailable (signal will be N/A)"))
            return False
        if result.returncode == 0:
            self.checks.append((label, True, " ".join(command)))
            return True
        self.checks.append((label, False, f"{command[0]} exited with {result.returncode} (signal will be N/A)"))
        return False

    def check_dependencies(self) -> bool:
        """检查依赖包"""
        # pip包名 -> Python导入名的映射
        required_packages = {
            "pillow": "PIL",
            "numpy": "numpy",
            "psutil": "psutil",
            "pyyaml": "yaml",
            "python-dotenv": "dotenv",
            "rich": "rich",
            "questionary": "questionary",
        }
        all_available = True

        for pip_name, import_name in required_packages.items():
            try:
                __import__(import_name)
                self.checks.append((f"Package: {pip_name}", True, "installed"))
            except ImportError:
                self.checks.append((f"Package: {pip_name}", False, "missing"))
                all_available = False

        return all_available

    def run_all_checks(self) -> bool:
        """运行所有检查"""
        self.checks.clear()

        all_passed = True
        if not self.check_python_version():
            all_passed = False
        self.check_system_info()
        self.check_processor_count()

        # 可选子系统：缺失时只会让对应信号变成 N/A
        self.check_tool("Font subsystem", self.settings.font_command)
        self.check_tool("Graphics renderer", self.settings.renderer_command)
        self.check_tool("Display geometry", self.settings.screen_command)

        if not self.check_dependencies():
            all_passed = False
        return all_passed

    def print_results(self):
        """打印检查结果"""
        print_info("Environment check results:")
        print()

        for name, passed, detail in self.checks:
            if passed:
                print_success(f"{name}: {detail}")
            elif detail and "N/A" in detail:
                print_warning(f"{name}: {detail}")
            else:
                print_error(f"{name}: {detail}")

    def get_summary(self) -> Dict[str, int]:
        """获取检查摘要"""
        passed = sum(1 for _, p, _ in self.checks if p)
        failed = sum(1 for _, p, _ in self.checks if not p)

        return {
            "total": len(self.checks),
            "passed": passed,
            "failed": failed
        }
