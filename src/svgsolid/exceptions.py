"""Exception hierarchy for svgsolid."""


class SvgSolidError(Exception):
    """Base exception for all svgsolid errors."""

    pass


class InputLoadError(SvgSolidError):
    """Error reading an input file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load '{path}': {reason}")


class ParseError(SvgSolidError):
    """Input markup is unparseable or yields no usable shapes."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Could not parse outline: {reason}")


class ValidationError(SvgSolidError):
    """A geometry structurally fails path validation."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ProcessingError(SvgSolidError):
    """A pipeline stage was left with nothing to work with."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(message)


class GeometryOperationFailure(SvgSolidError):
    """A geometry kernel call faulted or returned invalid output."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(f"{operation} failed: {reason}")


class ExportError(SvgSolidError):
    """Error serializing a mesh."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Export failed: {reason}")


class ProcessingTimeoutError(SvgSolidError, TimeoutError):
    """A conversion ran past its deadline."""

    def __init__(self, stage: str, timeout: float) -> None:
        self.stage = stage
        self.timeout = timeout
        super().__init__(f"Processing exceeded {timeout:g}s during {stage}")

