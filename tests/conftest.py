import textwrap
from pathlib import Path

import pytest


def make_post(
    title="T",
    description="D",
    author="A",
    tags=("x",),
    published="2025-01-23",
    og_image=None,
    body="hello",
) -> str:
    lines = ["---", f"title: {title}", f"description: {description}", f"author: {author}"]
    lines.append("tags: [" + ", ".join(tags) + "]")
    if published is not None:
        lines.append(f"published: {published}")
    if og_image is not None:
        lines.append(f"ogImage: {og_image}")
    lines.append("---")
    return "\n".join(lines) + "\n" + textwrap.dedent(body)


@pytest.fixture
def content_dir(tmp_path: Path) -> Path:
    root = tmp_path / "blog"
    root.mkdir()
    return root


@pytest.fixture
def write_post(content_dir: Path):
    def write(name: str, **kwargs) -> Path:
        path = content_dir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(make_post(**kwargs), encoding="utf-8")
        return path

    return write
