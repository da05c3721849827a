"""CLI application entry point for svgsolid.

This module provides the main CLI interface using Typer.
"""

import os
import time
from pathlib import Path
from typing import Annotated

import typer

from svgsolid import __version__
from svgsolid.cli.output import (
    console,
    create_progress,
    print_batch_summary,
    print_cancellation_notice,
    print_cancellation_summary,
    print_error,
    print_header,
    print_input_info,
    print_preflight,
    print_processing_info,
    print_profiles,
    print_setting_warnings,
    print_step,
    print_success,
)
from svgsolid.config import (
    DEFAULT_PROFILE_ID,
    PROFILES,
    LoggingConfig,
    MeshConfig,
    ProcessingConfig,
    Profile,
    ProfileSettings,
    SvgSolidSettings,
    get_profile,
)
from svgsolid.core import BatchProcessor, GeometryPipeline, ModelGenerator
from svgsolid.exceptions import ExportError, InputLoadError, ParseError, SvgSolidError
from svgsolid.io import MeshExporter, SvgReader
from svgsolid.utils import configure_logging

# Create the Typer app
app = typer.Typer(
    name="svgsolid",
    help="Turn SVG outlines into printable 3D models (STL).",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]svgsolid[/bold blue] v{__version__}")
        raise typer.Exit()


@app.command()
def convert(
    inputs: Annotated[
        list[Path] | None,
        typer.Argument(
            help="SVG file(s) to convert",
            show_default=False,
        ),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output file (one input) or directory (several inputs). Default: {name}.stl",
        ),
    ] = None,
    profile_id: Annotated[
        str,
        typer.Option(
            "--profile",
            "-p",
            help="Preset profile (logo-sign|cookie-cutter|stamp|keychain)",
        ),
    ] = DEFAULT_PROFILE_ID,
    thickness: Annotated[
        float | None,
        typer.Option("--thickness", "-t", help="Extrusion height of the outline"),
    ] = None,
    base_thickness: Annotated[
        float | None,
        typer.Option("--base-thickness", "-b", help="Base slab height (0 for none)", min=0.0),
    ] = None,
    offset: Annotated[
        float | None,
        typer.Option("--offset", help="Outline offset (positive expands, negative contracts)"),
    ] = None,
    simplify: Annotated[
        float | None,
        typer.Option("--simplify", help="Path simplification tolerance (0 to disable)", min=0.0),
    ] = None,
    remove_islands: Annotated[
        float | None,
        typer.Option("--remove-islands", help="Drop shapes smaller than this area (0 to disable)", min=0.0),
    ] = None,
    bevel: Annotated[
        float | None,
        typer.Option("--bevel", help="Chamfer size on the top edges (0 for none)", min=0.0),
    ] = None,
    ascii_stl: Annotated[
        bool,
        typer.Option("--ascii", help="Write ASCII STL instead of binary"),
    ] = False,
    check: Annotated[
        bool,
        typer.Option("--check", help="Run preflight checks only; do not write a model"),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing output files"),
    ] = False,
    list_profiles: Annotated[
        bool,
        typer.Option("--list-profiles", help="List preset profiles and exit"),
    ] = False,
    timeout: Annotated[
        float | None,
        typer.Option("--timeout", help="Seconds allowed per conversion", min=0.001),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option(
            "--workers",
            "-j",
            help="Number of parallel workers for several inputs (default: auto)",
            min=1,
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Convert SVG outlines into extruded 3D models.

    The outline is cleaned (closed, simplified, offset, tiny islands removed),
    united into one region and extruded, optionally on top of a base slab.

    Example:
        svgsolid logo.svg --profile logo-sign

    This will create logo.stl next to logo.svg.
    """
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    if list_profiles:
        print_profiles(PROFILES)
        raise typer.Exit(code=0)

    if not inputs:
        print_error("No input files given", details="Usage: svgsolid INPUT... [OPTIONS]")
        raise typer.Exit(code=1)

    profile = get_profile(profile_id)
    if profile is None:
        print_error(
            f"Unknown profile: {profile_id}",
            details="Valid values: " + ", ".join(p.id for p in PROFILES),
        )
        raise typer.Exit(code=1)

    for input_path in inputs:
        if not input_path.exists():
            print_error(
                f"Input file not found: {input_path}",
                details=f"The file '{input_path}' does not exist or is not accessible.",
            )
            raise typer.Exit(code=1)
        if not input_path.is_file():
            print_error(
                f"Input path is not a file: {input_path}",
                details="Please provide a path to an SVG file.",
            )
            raise typer.Exit(code=1)

    overrides = {
        "thickness": thickness,
        "base_thickness": base_thickness,
        "offset": offset,
        "simplify_tolerance": simplify,
        "remove_islands_threshold": remove_islands,
        "bevel": bevel,
    }
    profile_settings = profile.defaults.model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    settings = SvgSolidSettings(
        mesh=MeshConfig(binary_stl=not ascii_stl),
        processing=ProcessingConfig(max_workers=workers, timeout_seconds=timeout),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "WARNING",
        ),
    )

    if not quiet:
        print_header(__version__)

    try:
        if len(inputs) == 1:
            _convert_single(
                inputs[0], output, profile, profile_settings, settings, check, force, verbose, quiet
            )
        else:
            if output is not None and output.exists() and not output.is_dir():
                print_error(
                    f"Output must be a directory when converting several files: {output}"
                )
                raise typer.Exit(code=1)
            if check:
                _check_many(inputs, profile, profile_settings, settings, verbose, quiet)
            else:
                _convert_many(
                    inputs, output, profile, profile_settings, settings, force, workers, quiet
                )

    except InputLoadError as e:
        print_error(f"Could not load input: {e.reason}")
        raise typer.Exit(code=1)
    except ParseError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except ExportError as e:
        print_error(f"Could not write model: {e.reason}")
        raise typer.Exit(code=1)
    except SvgSolidError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)


def _convert_single(
    input_path: Path,
    output: Path | None,
    profile: Profile,
    profile_settings: ProfileSettings,
    settings: SvgSolidSettings,
    check: bool,
    force: bool,
    verbose: bool,
    quiet: bool,
) -> None:
    """Convert (or only check) one file in-process."""
    if settings.logging.log_file is not None:
        configure_logging(
            log_file=settings.logging.log_file,
            console_level=settings.logging.log_level,
            file_level=settings.logging.file_log_level,
            quiet=quiet,
        )

    if output is None:
        output_path = MeshExporter.get_output_path(input_path)
    elif output.is_dir():
        output_path = MeshExporter.get_output_path(input_path, output)
    else:
        output_path = output

    if not quiet:
        print_step("Loading outline")
        print_input_info(str(input_path), profile)
        print_setting_warnings(profile.check(profile_settings))

    markup = SvgReader.load(input_path)

    if check:
        pipeline = GeometryPipeline(settings.geometry)
        report = pipeline.preflight(pipeline.parse(markup), profile_settings)
        if not quiet:
            print_step("Preflight")
            print_preflight(report, verbose=verbose)
        raise typer.Exit(code=0 if report.passed else 1)

    if output_path.exists() and not force:
        print_error(
            f"Output file already exists: {output_path}",
            details="Use --force to overwrite it.",
        )
        raise typer.Exit(code=1)

    if not quiet:
        print_step("Converting")

    result = ModelGenerator(settings).generate(markup, profile_settings)

    if not quiet and result.preflight is not None:
        print_preflight(result.preflight, verbose=verbose)

    if not result.success:
        print_error(result.error or "Conversion failed")
        raise typer.Exit(code=1)

    MeshExporter.save(result.blob, output_path)

    if not quiet:
        print_success(
            output_path=str(output_path),
            file_size=_format_file_size(output_path),
            total_time_s=result.processing_time / 1000,
            triangles=result.triangle_count,
            warnings=result.warnings,
            verbose=verbose,
        )


def _check_many(
    inputs: list[Path],
    profile: Profile,
    profile_settings: ProfileSettings,
    settings: SvgSolidSettings,
    verbose: bool,
    quiet: bool,
) -> None:
    """Run preflight on several files; exit 1 if any fails."""
    if not quiet:
        print_setting_warnings(profile.check(profile_settings))

    pipeline = GeometryPipeline(settings.geometry)
    failed = 0
    for input_path in inputs:
        if not quiet:
            print_step(str(input_path))
        try:
            report = pipeline.preflight(pipeline.parse(SvgReader.load(input_path)), profile_settings)
        except (InputLoadError, ParseError) as e:
            print_error(str(e))
            failed += 1
            continue
        if not quiet:
            print_preflight(report, verbose=verbose)
        if not report.passed:
            failed += 1

    raise typer.Exit(code=1 if failed else 0)


def _convert_many(
    inputs: list[Path],
    output: Path | None,
    profile: Profile,
    profile_settings: ProfileSettings,
    settings: SvgSolidSettings,
    force: bool,
    workers: int | None,
    quiet: bool,
) -> None:
    """Convert several files with worker processes."""
    if not quiet:
        print_setting_warnings(profile.check(profile_settings))
        actual_workers = workers if workers else os.cpu_count() or 1
        print_step("Converting")
        print_processing_info(len(inputs), actual_workers, is_auto=(workers is None))

    processor = BatchProcessor(settings, profile_settings)
    stats = None
    start = time.time()

    try:
        if not quiet:
            with create_progress() as progress:
                task_id = progress.add_task(f"Converting {len(inputs)} files", total=len(inputs))

                def update_progress(completed: int, *_: object) -> None:
                    progress.update(task_id, completed=completed)

                stats = processor.process(
                    inputs=inputs,
                    output_dir=output,
                    max_workers=workers,
                    overwrite=force,
                    progress_callback=update_progress,
                )
        else:
            stats = processor.process(
                inputs=inputs,
                output_dir=output,
                max_workers=workers,
                overwrite=force,
            )
    except KeyboardInterrupt:
        if not quiet:
            print_cancellation_notice()
            print_cancellation_summary(
                processed=stats.processed_count if stats else 0,
                cancelled=stats.cancelled_count if stats else 0,
            )
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code

    if not quiet:
        print_batch_summary(
            total_time_s=stats.duration_seconds or time.time() - start,
            processed=stats.processed_count,
            skipped=stats.skipped_count,
            errors=stats.errors,
            triangles=stats.triangle_count,
        )
    if stats.error_count:
        raise typer.Exit(code=1)


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "428 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
