from __future__ import annotations

from pathlib import Path


class SiteError(Exception):
    """Base class for every error that aborts a build."""


class ConfigError(SiteError):
    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"Invalid config file {path}: {message}")


class ContentRootMissing(SiteError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Content directory not found: {path}")


class SchemaViolation(SiteError):
    def __init__(self, source: Path | str, errors: list) -> None:
        self.source = source
        self.errors = list(errors)
        details = "; ".join(str(error) for error in self.errors)
        super().__init__(f"Invalid front-matter in {source}: {details}")

    @property
    def fields(self) -> list[str]:
        return [error.field for error in self.errors]


class DuplicateIdentifier(SiteError):
    def __init__(self, identifier: str, paths: list[Path]) -> None:
        self.identifier = identifier
        self.paths = list(paths)
        joined = ", ".join(path.as_posix() for path in self.paths)
        super().__init__(f"Identifier '{identifier}' is derived from more than one file: {joined}")


class ContentConversionFailure(SiteError):
    def __init__(self, identifier: str, cause: BaseException) -> None:
        self.identifier = identifier
        self.cause = cause
        super().__init__(f"Could not render content of '{identifier}': {cause}")


class MissingRoute(SiteError):
    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"No published post with identifier '{identifier}'")


class UnreadableFile(SiteError):
    def __init__(self, path: Path | str, cause: BaseException) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Could not read {path}: {cause}")
