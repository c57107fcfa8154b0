"""CLI entrypoint for devprint."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Tuple

from rich.console import Console
from rich.logging import RichHandler

from .config_loader import Settings, apply_overrides, load_settings
from .env_checker import EnvironmentChecker
from .environment import build_local_host
from .guardian import collect_fingerprint
from .host import HostEnvironment
from .models import FingerprintResult
from .setup import run_init_wizard
from .snapshots import SnapshotHost, capture_snapshot, load_snapshots, write_snapshot
from .ui import (
    console,
    create_progress_spinner,
    print_banner,
    print_error,
    print_fingerprint,
    print_info,
    print_signals,
    print_success,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="devprint",
        description="🔏 devprint - stable environment fingerprints",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logging")
    subparsers = parser.add_subparsers(dest="command")

    # compute 命令 - 计算指纹
    compute_parser = subparsers.add_parser(
        "compute",
        help="Compute the fingerprint of the local host or of snapshot files",
    )
    compute_parser.add_argument(
        "--host-file",
        action="append",
        dest="host_files",
        help="Snapshot file(s) to fingerprint instead of the local host",
    )
    compute_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-provider deadline in seconds; late providers read N/A",
    )
    compute_parser.add_argument("--signals", action="store_true", help="Show every signal value")
    compute_parser.add_argument("--json", action="store_true", help="Emit machine-readable JSON")
    compute_parser.add_argument("--workdir", default=".", help="Directory holding .devprint.json / .env")
    compute_parser.set_defaults(func=_compute_command)

    # snapshot 命令 - 采集本机快照
    snapshot_parser = subparsers.add_parser(
        "snapshot",
        help="Capture the local host into a JSON or YAML snapshot",
    )
    snapshot_parser.add_argument("output", help="Destination file (.json, .yaml or .yml)")
    snapshot_parser.add_argument("--workdir", default=".", help="Directory holding .devprint.json / .env")
    snapshot_parser.set_defaults(func=_snapshot_command)

    # check 命令 - 环境检测
    check_parser = subparsers.add_parser("check", help="Report which host subsystems are available")
    check_parser.add_argument("--workdir", default=".", help="Directory holding .devprint.json / .env")
    check_parser.set_defaults(func=_check_command)

    # init 命令 - 交互式配置向导
    init_parser = subparsers.add_parser("init", help="Write .devprint.json interactively")
    init_parser.add_argument("--workdir", default=".", help="Where to write the configuration")
    init_parser.set_defaults(func=_init_command)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    # 如果没有提供命令，显示横幅和帮助
    if not hasattr(args, "func"):
        print_banner()
        parser.print_help()
        return 1

    return args.func(args)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_settings(args: argparse.Namespace) -> Settings:
    workdir = Path(args.workdir).expanduser().resolve()
    settings = load_settings(workdir)
    timeout = getattr(args, "timeout", None)
    if timeout is not None:
        apply_overrides(settings, {"provider_timeout": timeout}, base_dir=workdir)
    return settings


def _resolve_hosts(args: argparse.Namespace, settings: Settings) -> List[Tuple[str, HostEnvironment]]:
    if args.host_files:
        return list(zip(args.host_files, load_snapshots(args.host_files)))
    if settings.host_file:
        return [(str(settings.host_file), SnapshotHost.from_file(settings.host_file))]
    return [("local", build_local_host(settings))]


def _compute_command(args: argparse.Namespace) -> int:
    """计算指纹"""
    try:
        settings = _load_settings(args)
        hosts = _resolve_hosts(args, settings)
    except (FileNotFoundError, ValueError) as exc:
        print_error(str(exc))
        return 1

    results: List[Tuple[str, FingerprintResult]] = []
    for label, host in hosts:
        result = asyncio.run(collect_fingerprint(host, provider_timeout=settings.provider_timeout))
        results.append((label, result))

    if args.json:
        payload = [dict(result.to_dict(), host=label) for label, result in results]
        print(json.dumps(payload[0] if len(payload) == 1 else payload, indent=2, ensure_ascii=False))
        return 0

    for label, result in results:
        print_fingerprint(label, result)
        if args.signals:
            print_signals(result)
    console.print()
    return 0


def _snapshot_command(args: argparse.Namespace) -> int:
    """采集本机快照"""
    try:
        settings = _load_settings(args)
    except (FileNotFoundError, ValueError) as exc:
        print_error(str(exc))
        return 1

    host = build_local_host(settings)
    with create_progress_spinner() as progress:
        progress.add_task("Capturing host signals...", total=None)
        snapshot = asyncio.run(capture_snapshot(host))

    try:
        path = write_snapshot(Path(args.output), snapshot)
    except OSError as exc:
        print_error(f"Failed to write snapshot: {exc}")
        return 1
    print_success(f"Snapshot saved to {path}")
    print_info(f"Replay it with: [cyan]devprint compute --host-file {path}[/cyan]")
    return 0


def _check_command(args: argparse.Namespace) -> int:
    """环境检测"""
    try:
        settings = _load_settings(args)
    except (FileNotFoundError, ValueError) as exc:
        print_error(str(exc))
        return 1

    checker = EnvironmentChecker(settings)
    passed = checker.run_all_checks()
    checker.print_results()
    summary = checker.get_summary()
    console.print()
    print_info(f"{summary['passed']}/{summary['total']} checks passed")
    return 0 if passed else 1


def _init_command(args: argparse.Namespace) -> int:
    """运行初始化向导"""
    return run_init_wizard(Path(args.workdir))


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
