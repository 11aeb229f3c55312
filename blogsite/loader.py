from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .content import slugify, split_front_matter
from .errors import ContentRootMissing, DuplicateIdentifier, UnreadableFile
from .schema import PostMetadata, require_metadata

MARKDOWN_EXTENSIONS = (".md", ".markdown")


@dataclass(frozen=True)
class PostEntry:
    identifier: str
    metadata: PostMetadata
    body: str
    source: Path

    @property
    def is_published(self) -> bool:
        return self.metadata.published is not None


def discover_files(root: Path, extensions: tuple[str, ...] = MARKDOWN_EXTENSIONS) -> list[Path]:
    if not root.is_dir():
        raise ContentRootMissing(root)
    suffixes = {suffix.lower() for suffix in extensions}
    files = [path for path in root.rglob("*") if path.is_file() and path.suffix.lower() in suffixes]
    return sorted(files, key=lambda p: p.as_posix())


def derive_identifier(path: Path) -> str:
    return slugify(path.stem)


def rel_name(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def load_entry(path: Path, root: Path) -> PostEntry:
    source = rel_name(path, root)
    try:
        raw_text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableFile(source, exc) from exc
    meta, body = split_front_matter(raw_text, source)
    metadata = require_metadata(meta, source)
    return PostEntry(
        identifier=derive_identifier(path),
        metadata=metadata,
        body=body,
        source=Path(source),
    )


def load_entries(root: Path, extensions: tuple[str, ...] = MARKDOWN_EXTENSIONS) -> dict[str, PostEntry]:
    entries: dict[str, PostEntry] = {}
    for path in discover_files(root, extensions):
        entry = load_entry(path, root)
        existing = entries.get(entry.identifier)
        if existing is not None:
            raise DuplicateIdentifier(entry.identifier, [existing.source, entry.source])
        entries[entry.identifier] = entry
    return entries
