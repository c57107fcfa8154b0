"""美化的终端界面工具模块"""

from __future__ import annotations

from typing import List

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from .models import FingerprintResult

console = Console()

BANNER = """
    ╔═══════════════════════════════════════════╗
    ║            🔏 devprint CLI                ║
    ║    Environment fingerprint toolkit        ║
    ╚═══════════════════════════════════════════╝
"""


def print_banner():
    console.print(BANNER, style="bold cyan")


def print_section_header(title: str):
    """打印向导步骤标题"""
    rule = f"[bold blue]{'─' * 50}[/bold blue]"
    console.print()
    console.print(rule)
    console.print(f"[bold white]  {title}[/bold white]")
    console.print(rule)
    console.print()


def print_success(message: str):
    console.print(f"[bold green]✓[/bold green] {message}")


def print_error(message: str):
    """打印错误消息（异常文本不按 markup 解析）"""
    console.print(f"[bold red]✗[/bold red] {escape(message)}")


def print_warning(message: str):
    console.print(f"[bold yellow]⚠[/bold yellow] {message}")


def print_info(message: str):
    console.print(f"[cyan]ℹ[/cyan] {message}")


def create_info_panel(title: str, content: str, style: str = "blue"):
    console.print(Panel(content, title=title, border_style=style, box=box.ROUNDED, padding=(1, 2)))


def print_table(title: str, columns: List[str], rows: List[List[str]]):
    table = Table(title=title, box=box.ROUNDED, header_style="bold magenta")
    for column in columns:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*row)
    console.print(table)


def create_progress_spinner() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    )


def print_fingerprint(label: str, result: FingerprintResult):
    """打印单个主机的指纹摘要"""
    console.print()
    console.print(f"[cyan]Host:[/cyan] {escape(label)}")
    console.print(f"[cyan]Fingerprint:[/cyan] [bold green]{result.fingerprint}[/bold green]")
    if result.elapsed_seconds is not None:
        console.print(f"[cyan]Elapsed:[/cyan] [dim]{result.elapsed_seconds:.3f}s[/dim]")


def print_signals(result: FingerprintResult, max_width: int = 60):
    """打印信号明细"""
    rows = []
    for signal in result.signals:
        value = signal.render()
        if len(value) > max_width:
            value = value[: max_width - 1] + "…"
        status = "[green]✓[/green]" if signal.available else "[yellow]N/A[/yellow]"
        rows.append([str(signal.index), signal.name, signal.kind, status, escape(value)])
    print_table("Signals", ["#", "Name", "Kind", "Status", "Value"], rows)
