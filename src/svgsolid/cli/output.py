"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with progress bars, tables, and formatted messages.
"""


from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table
from rich.text import Text

from svgsolid.config import Profile
from svgsolid.domain import PreflightResult, Severity

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_WARN = "!"  # Warning
SYM_DOT = "·"  # Separator/secondary info

_SEVERITY_STYLE = {
    Severity.ERROR: ("red", SYM_ERR),
    Severity.WARNING: ("yellow", SYM_WARN),
    Severity.INFO: ("blue", SYM_DOT),
}


def create_progress() -> Progress:
    """Create a rich progress bar for batch conversion.

    Returns:
        Configured Progress instance with bar and time elapsed.
    """
    return Progress(
        TextColumn("  "),
        BarColumn(bar_width=40, complete_style="green", finished_style="green"),
        TaskProgressColumn(),
        TimeElapsedColumn(),
        console=console,
        transient=False,
    )


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]svgsolid[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_input_info(input_path: str, profile: Profile) -> None:
    """Print the input file and the profile in use."""
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(input_path)
    console.print(line)
    console.print(f"  profile {profile.id} {SYM_DOT} {profile.name}")


def print_setting_warnings(messages: list[str]) -> None:
    """Print settings that fall outside the profile's ranges."""
    for message in messages:
        console.print(f"  [yellow]{SYM_WARN}[/yellow] {message}")


def print_preflight(result: PreflightResult, verbose: bool = False) -> None:
    """Print preflight findings and statistics.

    Args:
        result: Preflight outcome
        verbose: Also show statistics and info-level findings
    """
    stats = result.stats
    console.print(
        f"  {stats.path_count} paths {SYM_DOT} {stats.closed_paths} closed "
        f"{SYM_DOT} {stats.open_paths} open {SYM_DOT} "
        f"{stats.width:.1f} x {stats.height:.1f}"
    )
    if verbose:
        console.print(
            f"  {stats.total_points:,} points {SYM_DOT} "
            f"intersections: {'yes' if stats.has_intersections else 'no'} {SYM_DOT} "
            f"tiny islands: {stats.tiny_islands_count}"
        )

    for issue in result.issues:
        if issue.severity is Severity.INFO and not verbose:
            continue
        style, symbol = _SEVERITY_STYLE[issue.severity]
        console.print(f"  [{style}]{symbol}[/{style}] {issue.message}")
        if issue.detail and verbose:
            console.print(f"    {issue.detail}")
        if issue.suggested_fix:
            console.print(f"    [dim]{issue.suggested_fix}[/dim]")

    if result.passed:
        console.print(f"  [green]{SYM_OK} Preflight passed[/green]")
    else:
        console.print(f"  [red]{SYM_ERR} Preflight failed[/red]")


def print_profiles(profiles: list[Profile]) -> None:
    """Print the preset catalog as a table."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Profile")
    table.add_column("Thickness", justify="right")
    table.add_column("Base", justify="right")
    table.add_column("Offset", justify="right")
    table.add_column("Simplify", justify="right")
    table.add_column("Islands", justify="right")
    table.add_column("Bevel", justify="right")
    table.add_column("Description")

    for profile in profiles:
        d = profile.defaults
        table.add_row(
            profile.id,
            f"{d.thickness:g}",
            f"{d.base_thickness:g}",
            f"{d.offset:g}",
            f"{d.simplify_tolerance:g}",
            f"{d.remove_islands_threshold:g}",
            f"{d.bevel:g}",
            profile.description,
        )
    console.print(table)


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_processing_info(files: int, workers: int, is_auto: bool = False) -> None:
    """Print batch configuration.

    Args:
        files: Number of files to convert
        workers: Number of parallel workers
        is_auto: Whether the count was auto-detected
    """
    auto_suffix = " (auto)" if is_auto else ""
    console.print(f"  {files} files {SYM_DOT} {workers} workers{auto_suffix} {SYM_DOT} Ctrl+C to cancel")


def print_success(
    output_path: str,
    file_size: str,
    total_time_s: float,
    triangles: int,
    warnings: list[str],
    verbose: bool = False,
) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        total_time_s: Total processing time in seconds
        triangles: Triangles in the exported mesh
        warnings: Recovered problems
        verbose: Show each warning
    """
    time_str = _format_time(total_time_s)

    console.print(f"\n[bold green]{SYM_OK} Complete[/bold green] in {time_str}")

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    warning_style = "yellow" if warnings else "green"
    console.print(
        f"  {triangles:,} triangles {SYM_DOT} "
        f"[{warning_style}]{len(warnings)} warnings[/{warning_style}]"
    )
    if verbose:
        for warning in warnings:
            console.print(f"  [yellow]{SYM_WARN}[/yellow] {warning}")


def print_batch_summary(
    total_time_s: float,
    processed: int,
    skipped: int,
    errors: list[tuple[str, str]],
    triangles: int,
) -> None:
    """Print batch conversion summary.

    Args:
        total_time_s: Total processing time in seconds
        processed: Files converted
        skipped: Files skipped because their output exists
        errors: (file, message) pairs for failed files
        triangles: Total triangles across all models
    """
    time_str = _format_time(total_time_s)
    header_style = "bold red" if errors else "bold green"
    symbol = SYM_ERR if errors else SYM_OK
    console.print(f"\n[{header_style}]{symbol} Complete[/{header_style}] in {time_str}")

    error_style = "red" if errors else "green"
    console.print(
        f"  {processed} converted {SYM_DOT} {skipped} skipped {SYM_DOT} "
        f"[{error_style}]{len(errors)} errors[/{error_style}] {SYM_DOT} {triangles:,} triangles"
    )
    for file_name, message in errors:
        line = Text(f"  {SYM_ERR} ", style="red")
        line.append(file_name, style="bold")
        line.append(f": {message}", style="default")
        console.print(line)


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    console.print(f"\n[bold red]{SYM_ERR} Error:[/bold red] {message}")
    if details:
        console.print(f"  {details}")


def print_cancellation_notice() -> None:
    """Print cancellation acknowledgment."""
    console.print(f"\n{SYM_DOT} Cancelling... waiting for in-progress files")


def print_cancellation_summary(processed: int, cancelled: int) -> None:
    """Print cancellation summary.

    Args:
        processed: Number of files converted before cancellation
        cancelled: Number of pending tasks that were cancelled
    """
    console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
    console.print(f"  {processed} files completed {SYM_DOT} {cancelled} tasks cancelled")
