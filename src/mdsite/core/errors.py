"""Error kinds raised or reported by the build core"""

from pathlib import Path


class MdsiteError(Exception):
    """Base class for build core errors."""


class ConfigMissing(MdsiteError):
    """A required configuration option is absent (gallerytag.url, thumbnail dimensions)."""

    def __init__(self, option: str):
        self.option = option
        super().__init__(f"Missing required config option: {option}")


class DecodeError(MdsiteError):
    """The source image could not be read or decoded."""

    def __init__(self, path: Path | str, cause: Exception = None):
        self.path = Path(path)
        self.cause = cause
        msg = f"Cannot decode image: {path}"
        if cause:
            msg = f"{msg} ({cause})"
        super().__init__(msg)


class ParseAmbiguity(MdsiteError):
    """Diagnostic: a gallery line has no `::` separator; its caption defaults to empty."""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Gallery line without '::' separator: {line!r}")


class DuplicateSeriesPart(MdsiteError):
    """Diagnostic: two or more members of one series share a part number."""

    def __init__(self, series_id: str, part, paths: list[str]):
        self.series_id = series_id
        self.part = part
        self.paths = list(paths)
        super().__init__(
            f"Series {series_id!r} has {len(self.paths)} posts with part {part}: {', '.join(self.paths)}"
        )
