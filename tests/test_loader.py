from pathlib import Path

import pytest

from blogsite.errors import ContentRootMissing, DuplicateIdentifier, SchemaViolation, UnreadableFile
from blogsite.loader import derive_identifier, discover_files, load_entries, load_entry


def test_discover_files_is_recursive_and_sorted(content_dir, write_post):
    write_post("b.md")
    write_post("nested/deeper/a.md")
    (content_dir / "notes.txt").write_text("ignored", encoding="utf-8")
    files = discover_files(content_dir)
    assert [path.relative_to(content_dir).as_posix() for path in files] == ["b.md", "nested/deeper/a.md"]


def test_discover_files_missing_root(tmp_path):
    with pytest.raises(ContentRootMissing):
        discover_files(tmp_path / "nope")


def test_derive_identifier_uses_last_segment():
    assert derive_identifier(Path("2025/My-Post.md")) == "my-post"


def test_load_entry(content_dir, write_post):
    path = write_post("first-post.md", tags=("x", "y"), body="hello")
    entry = load_entry(path, content_dir)
    assert entry.identifier == "first-post"
    assert entry.metadata.title == "T"
    assert entry.metadata.tags == ("x", "y")
    assert entry.body == "hello"
    assert entry.source == Path("first-post.md")
    assert entry.is_published


def test_load_entries_keeps_drafts(content_dir, write_post):
    write_post("live.md")
    write_post("draft.md", published=None)
    entries = load_entries(content_dir)
    assert set(entries) == {"live", "draft"}
    assert not entries["draft"].is_published


def test_invalid_front_matter_fails_the_load(content_dir, write_post):
    write_post("good.md")
    (content_dir / "bad.md").write_text("---\ntitle: Only title\n---\nBody", encoding="utf-8")
    with pytest.raises(SchemaViolation) as excinfo:
        load_entries(content_dir)
    assert excinfo.value.source == "bad.md"
    assert "description" in excinfo.value.fields


def test_file_without_front_matter_fails(content_dir):
    (content_dir / "plain.md").write_text("# Just markdown", encoding="utf-8")
    with pytest.raises(SchemaViolation):
        load_entries(content_dir)


def test_duplicate_identifiers_are_rejected(content_dir, write_post):
    write_post("one/post.md")
    write_post("two/Post.md")
    with pytest.raises(DuplicateIdentifier) as excinfo:
        load_entries(content_dir)
    assert excinfo.value.identifier == "post"
    assert len(excinfo.value.paths) == 2


def test_empty_content_root(content_dir):
    assert load_entries(content_dir) == {}


def test_identifier_is_url_safe(content_dir, write_post):
    write_post("Release Notes #1.md")
    entries = load_entries(content_dir)
    assert list(entries) == ["release-notes-1"]
    assert entries["release-notes-1"].source == Path("Release Notes #1.md")


def test_collisions_are_checked_after_slugifying(content_dir, write_post):
    write_post("My Post.md")
    write_post("my_post.md")
    with pytest.raises(DuplicateIdentifier) as excinfo:
        load_entries(content_dir)
    assert excinfo.value.identifier == "my-post"


def test_undecodable_file_is_a_build_error(content_dir):
    (content_dir / "bad.md").write_bytes(b"---\ntitle: \xff\xfe\n---\nbody")
    with pytest.raises(UnreadableFile) as excinfo:
        load_entries(content_dir)
    assert excinfo.value.path == "bad.md"
