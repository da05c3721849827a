"""Request orchestration for outline-to-model conversion.

This module coordinates the full workflow (parse, preflight, process, build,
export) for single requests and for batches of files processed in parallel
with ProcessPoolExecutor.

Key components:
- ModelGenerator: Converts markup to a model; synchronous or via a Future
- process_file: Top-level picklable function for parallel execution
- BatchProcessor: Converts many files using worker processes
"""

import time
import traceback
from collections.abc import Callable
from concurrent.futures import Future, ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any

import structlog

from svgsolid.config import ProfileSettings, SvgSolidSettings
from svgsolid.core.deadline import Deadline
from svgsolid.core.mesh import MeshBuilder
from svgsolid.core.pipeline import GeometryPipeline
from svgsolid.domain import GenerationResult
from svgsolid.exceptions import SvgSolidError, ValidationError
from svgsolid.io import MeshExporter, SvgReader
from svgsolid.utils import ConversionLogger, ConversionStats, configure_logging

logger = structlog.get_logger(__name__)


class ModelGenerator:
    """Converts SVG markup into an exported model.

    Each call builds its own pipeline and mesh builder; nothing is shared
    between requests except configuration.

    Example:
        with ModelGenerator() as generator:
            result = generator.generate(markup, profile)
            future = generator.submit(other_markup, profile)
            other = future.result()
    """

    def __init__(self, settings: SvgSolidSettings | None = None) -> None:
        """Initialize the generator.

        Args:
            settings: Application settings (defaults if None)
        """
        self.settings = settings or SvgSolidSettings()
        self._executor: ThreadPoolExecutor | None = None

    def generate(
        self,
        markup: str,
        profile: ProfileSettings,
        timeout: float | None = None,
        require_preflight: bool = False,
    ) -> GenerationResult:
        """Run the full conversion for one document.

        Conversion failures never raise; they come back as an unsuccessful
        result carrying the error message.

        Args:
            markup: SVG document text
            profile: Extrusion settings
            timeout: Seconds allowed (settings default if None)
            require_preflight: Fail when preflight reports an error

        Returns:
            GenerationResult with the model bytes or the error
        """
        start = time.perf_counter()
        if timeout is None:
            timeout = self.settings.processing.timeout_seconds
        deadline = Deadline(timeout)
        preflight = None

        try:
            pipeline = GeometryPipeline(self.settings.geometry)
            parsed = pipeline.parse(markup)

            deadline.check("preflight")
            preflight = pipeline.preflight(parsed, profile)
            if require_preflight and not preflight.passed:
                raise ValidationError(
                    "Preflight failed: " + "; ".join(i.message for i in preflight.errors)
                )

            processed = pipeline.process(parsed, profile, deadline)
            built = MeshBuilder(self.settings.mesh).build(processed.compound, profile, deadline)

            deadline.check("export")
            exporter = MeshExporter(binary=self.settings.mesh.binary_stl)
            blob = exporter.export(built.mesh)
        except SvgSolidError as e:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.warning(
                "Generation failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(elapsed_ms, 2),
            )
            return GenerationResult(
                success=False,
                error=str(e),
                processing_time=elapsed_ms,
                preflight=preflight,
            )

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            "Generation complete",
            triangles=built.triangle_count,
            bytes=len(blob),
            duration_ms=round(elapsed_ms, 2),
        )
        return GenerationResult(
            success=True,
            blob=blob,
            processing_time=elapsed_ms,
            file_format=exporter.file_format,
            triangle_count=built.triangle_count,
            preflight=preflight,
            warnings=[*processed.warnings, *built.warnings],
        )

    def submit(
        self,
        markup: str,
        profile: ProfileSettings,
        timeout: float | None = None,
        require_preflight: bool = False,
    ) -> "Future[GenerationResult]":
        """Run :meth:`generate` on a background thread.

        Returns:
            Future resolving to the GenerationResult
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="svgsolid")
        return self._executor.submit(self.generate, markup, profile, timeout, require_preflight)

    def close(self) -> None:
        """Shut down the background executor, waiting for running work."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "ModelGenerator":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _preflight_counts(result: GenerationResult) -> dict[str, Any] | None:
    report = result.preflight
    if report is None:
        return None
    return {
        "passed": report.passed,
        "errors": len(report.errors),
        "warnings": len(report.warnings),
    }


def process_file(
    input_path: str,
    output_path: str,
    profile_dict: dict[str, Any],
    settings_dict: dict[str, Any],
) -> dict[str, Any]:
    """Convert a single file.

    Top-level function designed to be picklable for use with ProcessPoolExecutor.

    Args:
        input_path: SVG file to read
        output_path: Model file to write
        profile_dict: Serialized ProfileSettings
        settings_dict: Serialized SvgSolidSettings

    Returns:
        Dictionary containing either:
        - Success: {"file", "output", "triangles", "warnings", "preflight", "duration_ms"}
        - Error: {"error": str, "file": str, "traceback": str | None, "duration_ms": float}
    """
    start_time = time.time()

    try:
        settings = SvgSolidSettings.model_validate(settings_dict)
        profile = ProfileSettings.model_validate(profile_dict)

        markup = SvgReader.load(Path(input_path))
        result = ModelGenerator(settings).generate(markup, profile)

        if not result.success:
            return {
                "error": result.error,
                "file": input_path,
                "traceback": None,
                "duration_ms": (time.time() - start_time) * 1000,
            }

        MeshExporter.save(result.blob, Path(output_path))

        return {
            "file": input_path,
            "output": output_path,
            "triangles": result.triangle_count,
            "warnings": result.warnings,
            "preflight": _preflight_counts(result),
            "duration_ms": (time.time() - start_time) * 1000,
        }

    except Exception as e:
        # Capture full traceback for debugging
        return {
            "error": str(e),
            "file": input_path,
            "traceback": traceback.format_exc(),
            "duration_ms": (time.time() - start_time) * 1000,
        }


class BatchProcessor:
    """Orchestrates parallel conversion of many SVG files.

    Manages the complete workflow:
    1. Resolve output paths and skip existing outputs unless overwriting
    2. Convert files in parallel using worker processes
    3. Collect results and update statistics

    Example:
        processor = BatchProcessor(SvgSolidSettings(), profile)
        stats = processor.process(
            inputs=[Path("a.svg"), Path("b.svg")],
            output_dir=Path("models"),
            max_workers=4,
        )
    """

    def __init__(self, config: SvgSolidSettings, profile: ProfileSettings) -> None:
        """Initialize batch processor with configuration.

        Args:
            config: Application settings
            profile: Extrusion settings applied to every file
        """
        self.config = config
        self.profile = profile
        self.logger = configure_logging(
            log_file=config.logging.log_file,
            console_level=config.logging.log_level,
            file_level=config.logging.file_log_level,
            quiet=False,
        )

    def process(
        self,
        inputs: list[Path],
        output_dir: Path | None = None,
        max_workers: int | None = None,
        overwrite: bool = True,
        progress_callback: Callable[[int, int, str, bool], None] | None = None,
    ) -> ConversionStats:
        """Convert files with parallel worker processes.

        Args:
            inputs: SVG files to convert
            output_dir: Directory for models (next to each input if None)
            max_workers: Maximum worker processes (None = config default)
            overwrite: Replace existing model files
            progress_callback: Optional callback(completed, total, file_name, success)
                for progress updates

        Returns:
            ConversionStats with counts, timing, and error details

        Raises:
            KeyboardInterrupt: If processing is cancelled by user
        """
        run_logger = ConversionLogger(self.logger)
        stats = run_logger.stats
        stats.start_time = time.time()

        if max_workers is None:
            max_workers = self.config.processing.max_workers

        tasks: dict[str, str] = {}
        for input_path in inputs:
            output_path = MeshExporter.get_output_path(input_path, output_dir)
            if output_path.exists() and not overwrite:
                run_logger.log_file_skipped(str(input_path), "output exists")
                continue
            tasks[str(input_path)] = str(output_path)

        self.logger.info(
            "Starting batch conversion",
            files=len(tasks),
            skipped=stats.skipped_count,
            max_workers=max_workers,
        )

        if tasks:
            self._process_parallel(tasks, max_workers, run_logger, progress_callback)

        stats.end_time = time.time()
        self.logger.info(
            "Batch conversion complete",
            processed=stats.processed_count,
            skipped=stats.skipped_count,
            errors=stats.error_count,
            triangles=stats.triangle_count,
            duration_seconds=round(stats.duration_seconds, 2),
        )
        return stats

    def _process_parallel(
        self,
        tasks: dict[str, str],
        max_workers: int | None,
        run_logger: ConversionLogger,
        progress_callback: Callable[[int, int, str, bool], None] | None,
    ) -> None:
        """Convert files using ProcessPoolExecutor.

        Args:
            tasks: Mapping of input path to output path
            max_workers: Maximum worker processes
            run_logger: Logger collecting this run's statistics
            progress_callback: Optional progress callback
        """
        stats = run_logger.stats
        profile_dict = self.profile.model_dump()
        settings_dict = self.config.model_dump(mode="json")

        total = len(tasks)
        completed = 0
        pending_futures: dict = {}

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            for input_path, output_path in tasks.items():
                run_logger.log_file_start(input_path)
                future = executor.submit(
                    process_file,
                    input_path,
                    output_path,
                    profile_dict,
                    settings_dict,
                )
                pending_futures[future] = input_path

            try:
                for future in as_completed(pending_futures):
                    file_name = pending_futures.pop(future)
                    success = False

                    try:
                        result = future.result()

                        if "error" in result:
                            run_logger.log_file_error(
                                file_name=file_name,
                                error=result["error"],
                                traceback=result.get("traceback"),
                            )
                        else:
                            success = True
                            preflight = result.get("preflight")
                            if preflight is not None:
                                run_logger.log_preflight(file_name, **preflight)
                            run_logger.log_file_complete(
                                file_name=file_name,
                                triangles=result["triangles"],
                                duration_ms=result.get("duration_ms", 0.0),
                            )

                    except Exception as e:
                        # Executor-level error
                        run_logger.log_file_error(
                            file_name=file_name,
                            error=e,
                            traceback=traceback.format_exc(),
                        )

                    completed += 1
                    if progress_callback is not None:
                        progress_callback(completed, total, file_name, success)

            except KeyboardInterrupt:
                self.logger.info("Cancellation requested by user")
                for f in pending_futures:
                    f.cancel()

                stats.was_cancelled = True
                stats.cancelled_count = len(pending_futures)

                executor.shutdown(wait=True, cancel_futures=True)
                raise
