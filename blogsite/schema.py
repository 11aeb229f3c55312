from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .errors import SchemaViolation

REQUIRED_TEXT_FIELDS = ("title", "description", "author")


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass(frozen=True)
class PostMetadata:
    title: str
    description: str
    author: str
    tags: tuple[str, ...] = ()
    published: Optional[dt.date] = None
    og_image: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    metadata: Optional[PostMetadata] = None
    errors: list[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.metadata is not None and not self.errors


def _check_text(raw: dict, key: str, errors: list[FieldError]) -> str:
    if key not in raw or raw[key] is None:
        errors.append(FieldError(key, "is required"))
        return ""
    value = raw[key]
    if not isinstance(value, str):
        errors.append(FieldError(key, f"must be text, got {type(value).__name__}"))
        return ""
    if not value.strip():
        errors.append(FieldError(key, "must not be empty"))
        return ""
    return value


def _check_tags(raw: dict, errors: list[FieldError]) -> tuple[str, ...]:
    if "tags" not in raw or raw["tags"] is None:
        errors.append(FieldError("tags", "is required"))
        return ()
    value = raw["tags"]
    if not isinstance(value, (list, tuple)):
        errors.append(FieldError("tags", f"must be a list of text, got {type(value).__name__}"))
        return ()
    bad = [index for index, item in enumerate(value) if not isinstance(item, str)]
    if bad:
        positions = ", ".join(str(index) for index in bad)
        errors.append(FieldError("tags", f"items at positions {positions} are not text"))
        return ()
    return tuple(value)


def _check_published(raw: dict, errors: list[FieldError]) -> Optional[dt.date]:
    value = raw.get("published")
    if value is None:
        return None
    # datetime is a date subclass, so it has to be tested first.
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return dt.date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return dt.datetime.fromisoformat(text).date()
        except ValueError:
            pass
        errors.append(FieldError("published", f"'{value}' is not a calendar date"))
        return None
    errors.append(FieldError("published", f"must be a date, got {type(value).__name__}"))
    return None


def _check_og_image(raw: dict, errors: list[FieldError]) -> Optional[str]:
    value = raw.get("ogImage")
    if value is None:
        return None
    if not isinstance(value, str):
        errors.append(FieldError("ogImage", f"must be text, got {type(value).__name__}"))
        return None
    return value


def validate_metadata(raw: dict) -> ValidationResult:
    if not isinstance(raw, dict):
        return ValidationResult(errors=[FieldError("front-matter", "must be a mapping")])
    errors: list[FieldError] = []
    title, description, author = (_check_text(raw, key, errors) for key in REQUIRED_TEXT_FIELDS)
    tags = _check_tags(raw, errors)
    published = _check_published(raw, errors)
    og_image = _check_og_image(raw, errors)
    if errors:
        return ValidationResult(errors=errors)
    return ValidationResult(
        metadata=PostMetadata(
            title=title,
            description=description,
            author=author,
            tags=tags,
            published=published,
            og_image=og_image,
        )
    )


def require_metadata(raw: dict, source: Path | str) -> PostMetadata:
    result = validate_metadata(raw)
    if not result.ok:
        raise SchemaViolation(source, result.errors)
    return result.metadata
