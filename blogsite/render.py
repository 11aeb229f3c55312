from __future__ import annotations

import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import markdown

from .content import count_words, normalize_list_spacing
from .errors import UnreadableFile

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
PLACEHOLDER_RE = re.compile(r"{{(\w+)}}")

DEFAULT_EXTENSIONS = ("fenced_code", "tables", "toc", "codehilite")
DEFAULT_EXTENSION_CONFIGS = {
    "toc": {"toc_depth": "2-4"},
    "codehilite": {"guess_lang": False, "css_class": "codehilite"},
}
TEMPLATES_DIR = Path(__file__).parent / "templates"


@dataclass(frozen=True)
class RenderedContent:
    html: str
    toc: str = ""
    words: int = 0


Converter = Callable[[str], RenderedContent]


def fix_relative_img_src(html_text: str, root: str) -> str:
    def repl(match: re.Match) -> str:
        attrs = match.group(1)
        src = match.group(2)
        if src.startswith(("http://", "https://", "data:", "#", "/", "./", "../")):
            return match.group(0)
        return f'<img{attrs}src="{root}/{src}"'

    return IMG_SRC_RE.sub(repl, html_text)


def strip_tags(html_text: str) -> str:
    return TAG_RE.sub("", html_text)


def convert_markdown(
    body: str,
    extensions: Optional[list[str]] = None,
    extension_configs: Optional[dict] = None,
    image_root: str = "..",
) -> RenderedContent:
    # A fresh Markdown instance per call keeps conversions safe to run in threads.
    md = markdown.Markdown(
        extensions=list(DEFAULT_EXTENSIONS if extensions is None else extensions),
        extension_configs=DEFAULT_EXTENSION_CONFIGS if extension_configs is None else extension_configs,
    )
    html_content = md.convert(normalize_list_spacing(body))
    toc_html = getattr(md, "toc", "")
    md.reset()
    html_content = fix_relative_img_src(html_content, image_root)
    return RenderedContent(html=html_content, toc=toc_html, words=count_words(strip_tags(html_content)))


def make_converter(extensions: Optional[list[str]] = None) -> Converter:
    if extensions is None:
        return convert_markdown
    configs = {key: value for key, value in DEFAULT_EXTENSION_CONFIGS.items() if key in extensions}

    def convert(body: str) -> RenderedContent:
        return convert_markdown(body, extensions=extensions, extension_configs=configs)

    return convert


def render_template(template: str, **context: str) -> str:
    # Single pass, so placeholders inside injected values are never expanded.
    def repl(match: re.Match) -> str:
        key = match.group(1)
        if key in context:
            return context[key]
        return match.group(0)

    return PLACEHOLDER_RE.sub(repl, template)


def read_template(path: Optional[Path] = None) -> str:
    if path is None:
        path = TEMPLATES_DIR / "base.html"
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableFile(path, exc) from exc


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_static(static_dir: Path, output_dir: Path) -> None:
    for item in static_dir.iterdir():
        dest = output_dir / item.name
        if item.is_dir():
            if dest.exists():
                shutil.rmtree(dest)
            shutil.copytree(item, dest)
        else:
            shutil.copy2(item, dest)
