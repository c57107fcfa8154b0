"""交互式配置向导模块"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import questionary
from questionary import Style

from .config_loader import CONFIG_FILENAMES, Settings, apply_overrides, save_settings
from .env_checker import EnvironmentChecker
from .ui import (
    console,
    create_info_panel,
    print_banner,
    print_error,
    print_info,
    print_section_header,
    print_success,
    print_warning,
)

# 自定义样式主题
custom_style = Style([
    ('qmark', 'fg:#673ab7 bold'),       # 问题标记
    ('question', 'bold'),                # 问题文本
    ('answer', 'fg:#f44336 bold'),      # 回答
    ('pointer', 'fg:#673ab7 bold'),     # 指针
    ('highlighted', 'fg:#673ab7 bold'), # 高亮
    ('selected', 'fg:#cc5454'),         # 已选择
    ('separator', 'fg:#cc5454'),        # 分隔符
    ('instruction', ''),                 # 指令
    ('text', ''),                        # 文本
    ('disabled', 'fg:#858585 italic')   # 禁用
])

HOST_LOCAL = "Local machine (read this host directly)"
HOST_SNAPSHOT = "Snapshot file (replay a captured host)"


def _validate_timeout(text: str):
    if not text.strip():
        return True
    try:
        return float(text) > 0 or "Timeout must be positive"
    except ValueError:
        return "Enter a number of seconds, or leave empty for no timeout"


class SetupWizard:
    """配置向导"""

    def __init__(self, workdir: Optional[Path] = None):
        self.workdir = (workdir or Path.cwd()).expanduser().resolve()
        self.settings = Settings()

    @property
    def config_path(self) -> Path:
        return self.workdir / CONFIG_FILENAMES[0]

    def run(self) -> bool:
        """运行配置向导"""
        print_banner()

        if self.config_path.exists():
            print_warning(f"Existing configuration found: {self.config_path}")
            overwrite = questionary.confirm(
                "Overwrite it?",
                default=False,
                style=custom_style
            ).ask()
            if not overwrite:
                print_info("Keeping the existing configuration.")
                return False

        if not self._step_environment_check():
            return False
        if not self._step_host_source():
            return False
        if not self._step_runtime():
            return False
        return self._step_save_config()

    def _step_environment_check(self) -> bool:
        """步骤1：环境检测"""
        print_section_header("📋 Step 1/3: environment check")

        checker = EnvironmentChecker(self.settings)
        checker.run_all_checks()
        checker.print_results()
        summary = checker.get_summary()
        console.print()

        if summary["failed"] > 0:
            print_warning(f"{summary['failed']} check(s) failed; affected signals will read N/A.")
            continue_anyway = questionary.confirm(
                "Continue anyway?",
                default=True,
                style=custom_style
            ).ask()
            if not continue_anyway:
                print_info("Setup cancelled.")
                return False
        else:
            print_success("All checks passed.")
        return True

    def _step_host_source(self) -> bool:
        """步骤2：选择主机来源"""
        print_section_header("🖥  Step 2/3: host source")

        choice = questionary.select(
            "Which host should `devprint compute` fingerprint by default?",
            choices=[HOST_LOCAL, HOST_SNAPSHOT],
            style=custom_style
        ).ask()
        if choice is None:
            return False

        if choice == HOST_SNAPSHOT:
            host_file = questionary.path(
                "Snapshot file (.json / .yaml):",
                style=custom_style
            ).ask()
            if not host_file:
                return False
            apply_overrides(self.settings, {"host_file": host_file}, base_dir=self.workdir)
        return True

    def _step_runtime(self) -> bool:
        """步骤3：运行参数"""
        print_section_header("⚙️  Step 3/3: runtime options")

        timeout = questionary.text(
            "Per-provider timeout in seconds (empty for none):",
            default="",
            validate=_validate_timeout,
            style=custom_style
        ).ask()
        if timeout is None:
            return False

        canvas_font = questionary.text(
            "Canvas font override (empty keeps Arial):",
            default="",
            style=custom_style
        ).ask()
        if canvas_font is None:
            return False

        apply_overrides(
            self.settings,
            {"provider_timeout": timeout, "canvas_font": canvas_font},
            base_dir=self.workdir,
        )
        return True

    def _step_save_config(self) -> bool:
        """保存配置"""
        try:
            save_settings(self.config_path, self.settings)
        except OSError as e:
            print_error(f"Failed to save configuration: {e}")
            return False

        timeout = self.settings.provider_timeout
        create_info_panel(
            "Saved",
            f"Config: {self.config_path}\n"
            f"Host: {self.settings.host_file or 'local machine'}\n"
            f"Provider timeout: {f'{timeout}s' if timeout else 'none'}",
            style="green",
        )
        print_info("Next: run [cyan]devprint compute --signals[/cyan]")
        return True


def run_init_wizard(workdir: Optional[Path] = None) -> int:
    """运行初始化向导"""
    wizard = SetupWizard(workdir)

    try:
        success = wizard.run()
        return 0 if success else 1
    except KeyboardInterrupt:
        console.print()
        print_warning("Setup cancelled.")
        return 1
