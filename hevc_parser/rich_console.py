"""
Rich console output for sweeps
"""

from pathlib import Path
from typing import Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .file_utils import format_file_size
from .models import EncoderChoice, SweepStats, TranscodeConfig

# Global console instance
console = Console()

ENCODER_NAMES = {
    EncoderChoice.APPLE_HW: "Apple VideoToolbox",
    EncoderChoice.INTEL_HW: "Intel Quick Sync",
    EncoderChoice.NVIDIA_HW: "NVIDIA NVENC",
    EncoderChoice.AMD_HW: "AMD AMF",
    EncoderChoice.SOFTWARE_CPU: "CPU (libx265)",
}


class RichOutput:
    """Rich console output manager"""

    def __init__(self):
        self.console = console

    def print_header(self, title: str):
        self.console.print(Panel.fit(
            f"[bold blue]{title}[/bold blue]",
            box=box.DOUBLE,
            border_style="blue"
        ))

    def print_config(self, root: Path, config: TranscodeConfig):
        """Print the sweep settings"""
        table = Table(show_header=False, box=box.ROUNDED)
        table.add_column("Setting", style="cyan", width=16)
        table.add_column("Value", style="white")

        table.add_row("Path", escape(str(root)))
        table.add_row("CRF", str(config.quality))
        table.add_row("Hardware", "yes" if config.use_hardware else "no")
        table.add_row("Disposal", config.disposal.value)
        if config.dry_run:
            table.add_row("Mode", "[yellow]dry run[/yellow]")

        self.console.print(table)

    def print_encoder(self, encoder: EncoderChoice, use_hardware: bool):
        name = ENCODER_NAMES.get(encoder, encoder.value)
        if encoder.is_hardware:
            self.console.print(f"[bold green]Hardware encoder:[/bold green] {name} ({encoder.value})")
        elif use_hardware:
            self.console.print("[bold yellow]Hardware encoding requested but not available - "
                               "using CPU encoding[/bold yellow]")
        else:
            self.console.print(f"[bold cyan]Encoder:[/bold cyan] {name}")

    def print_file_path(self, path: Path, size_bytes: Optional[int] = None):
        size = f" [dim]({format_file_size(size_bytes)})[/dim]" if size_bytes is not None else ""
        self.console.print(f"\n[bold cyan]Processing:[/bold cyan] {escape(str(path))}{size}")

    def print_processing_start(self, output_name: str):
        self.console.print(f"[bold green]Creating:[/bold green] {escape(output_name)}")

    def print_savings(self, before: int, after: int):
        saved = before - after
        ratio = (after / before * 100) if before else 0
        self.console.print(f"[green]{format_file_size(before)} → {format_file_size(after)} "
                           f"({ratio:.0f}%), saved {format_file_size(saved)}[/green]")

    def print_success(self, message: str = "Processing completed!"):
        self.console.print(f"[bold green]✓ {escape(message)}[/bold green]")

    def print_error(self, message: str, details: Optional[str] = None):
        self.console.print(f"[bold red]✗ {escape(message)}[/bold red]")
        if details:
            self.console.print(f"[red]Details: {escape(details)}[/red]")

    def print_disposal_error(self, message: str):
        """Converted file exists but the original is still there"""
        self.console.print(Panel(
            f"[bold red]{escape(message)}[/bold red]\n"
            "The converted file was written but the original could not be removed. "
            "Check both files by hand.",
            title="[bold red]Disposal failed[/bold red]",
            border_style="red"
        ))

    def print_info(self, message: str):
        self.console.print(f"[bold cyan]ℹ {escape(message)}[/bold cyan]")

    def print_skipped(self, reason: str = "Skipped"):
        self.console.print(f"[bold yellow]⏭ {escape(reason)}[/bold yellow]")

    def print_interrupted(self, message: str = "Processing interrupted"):
        self.console.print(f"\n[bold red]⏹ {escape(message)}[/bold red]")

    def print_final_summary(self, stats: SweepStats):
        """Print final sweep summary"""
        interrupted = stats.interrupted_files > 0
        if interrupted:
            status_color, title = "yellow", "⏹ Processing Interrupted"
        elif stats.has_failures:
            status_color, title = "red", "✗ Finished With Errors"
        else:
            status_color, title = "green", "✓ Processing Complete"

        table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
        table.add_column("Metric", style="cyan")
        table.add_column("Count", style="white", justify="right")

        table.add_row("Total Files", str(stats.total_files))
        table.add_row("Converted", f"[green]{stats.converted_files}[/green]")
        if stats.planned_files:
            table.add_row("Planned (dry run)", f"[blue]{stats.planned_files}[/blue]")
        table.add_row("Skipped", f"[yellow]{stats.skipped_files}[/yellow]")

        if interrupted:
            table.add_row("Interrupted", f"[red]{stats.interrupted_files}[/red]")
        if stats.error_files:
            table.add_row("Errors", f"[red]{stats.error_files}[/red]")
        if stats.disposal_errors:
            table.add_row("Disposal Errors", f"[bold red]{stats.disposal_errors}[/bold red]")
        if stats.converted_files:
            table.add_row("Saved", format_file_size(stats.saved_bytes))
        if stats.processing_duration:
            table.add_row("Duration", f"{stats.processing_duration:.1f}s")

        self.console.print(Panel(
            table,
            title=f"[bold {status_color}]{title}[/bold {status_color}]",
            border_style=status_color
        ))


# Global rich output instance
rich_output = RichOutput()
