from __future__ import annotations

import datetime as dt
import html
from pathlib import Path
from typing import Iterable, Optional

from .config import SiteConfig
from .render import render_template, write_text
from .routes import INDEX_PATH, PageUnit
from .utils import display_date, join_url


def footer_year(units: Iterable[PageUnit], fallback: str = "") -> str:
    years = [unit.metadata.published.year for unit in units]
    if not years:
        return fallback
    return str(max(years))


def copyright_line(site: SiteConfig, year: str) -> str:
    name = html.escape(site.site_name)
    if not year:
        return f"&copy; {name}"
    return f"&copy; {html.escape(year)} {name}"


def head_links(site: SiteConfig, root: str) -> str:
    if not site.has_sitemap:
        return ""
    return f'<link rel="sitemap" href="{root}/sitemap.xml" />'


def page_url(site: SiteConfig, path: str) -> str:
    if not site.site_url:
        return ""
    return join_url(site.site_url, path)


def image_url(site: SiteConfig, image: Optional[str], root: str) -> str:
    image = (image or site.default_og_image).strip()
    if image.startswith(("http://", "https://")):
        return image
    if site.site_url:
        return join_url(site.site_url, image)
    return f"{root}/{image.lstrip('/')}"


def build_head_meta(
    site: SiteConfig,
    title: str,
    description: str,
    root: str,
    path: str = "",
    author: str = "",
    image: Optional[str] = None,
    og_type: str = "website",
    published: Optional[dt.date] = None,
) -> str:
    tags = [
        ("name", "description", description),
        ("property", "og:type", og_type),
        ("property", "og:title", title),
        ("property", "og:description", description),
        ("property", "og:image", image_url(site, image, root)),
        ("property", "og:site_name", site.site_name),
        ("name", "twitter:card", "summary_large_image"),
    ]
    if author:
        tags.insert(1, ("name", "author", author))
    if published is not None:
        tags.append(("property", "article:published_time", published.isoformat()))
    url = page_url(site, path) if path else ""
    if url:
        tags.append(("property", "og:url", url))
    lines = [f'<meta {attr}="{key}" content="{html.escape(value)}" />' for attr, key, value in tags]
    if url:
        lines.append(f'<link rel="canonical" href="{html.escape(url)}" />')
    return "\n".join(lines)


def build_toc(toc_html: str) -> str:
    if not toc_html or "<li" not in toc_html:
        return ""
    return f'<nav class="post-toc"><h2>Contents</h2>{toc_html}</nav>'


def build_tag_chips(tags: Iterable[str]) -> str:
    return " ".join(f'<span class="chip">{html.escape(tag)}</span>' for tag in tags)


def render_post_page(unit: PageUnit, site: SiteConfig, template: str, year: str = "") -> str:
    root = ".."
    meta = unit.metadata
    title = html.escape(meta.title)
    published = meta.published
    content = (
        '<article class="post">'
        '<div class="post-meta">'
        f'<time class="post-date" datetime="{published.isoformat()}">{display_date(published)}</time>'
        f'<span class="post-author">{html.escape(meta.author)}</span>'
        f'<span class="post-words">{unit.content.words} words</span>'
        "</div>"
        f'<h1 class="post-title">{title}</h1>'
        f'<p class="post-description">{html.escape(meta.description)}</p>'
        f'<div class="post-tags">{build_tag_chips(meta.tags)}</div>'
        f"{build_toc(unit.content.toc)}"
        f'<div class="post-body">{unit.content.html}</div>'
        f'<div class="post-footer"><a href="{root}/{INDEX_PATH}">Back to home</a></div>'
        "</article>"
    )
    return render_template(
        template,
        lang=html.escape(site.lang),
        title=html.escape(f"{meta.title} | {site.site_name}"),
        head_meta=build_head_meta(
            site,
            meta.title,
            meta.description,
            root,
            path=unit.path,
            author=meta.author,
            image=meta.og_image,
            og_type="article",
            published=published,
        ),
        root=root,
        content=content,
        site_name=html.escape(site.site_name),
        site_description=html.escape(site.site_description),
        copyright=copyright_line(site, year or str(published.year)),
        extra_head=head_links(site, root),
    )


def sort_units(units: Iterable[PageUnit]) -> list[PageUnit]:
    return sorted(units, key=lambda unit: unit.metadata.published, reverse=True)


def build_post_list(units: list[PageUnit], root: str) -> str:
    items = []
    for unit in units:
        meta = unit.metadata
        items.append(
            '<li class="post-item">'
            f'<time class="post-date" datetime="{meta.published.isoformat()}">{display_date(meta.published)}</time>'
            f'<a class="post-link" href="{html.escape(root + "/" + unit.path)}">{html.escape(meta.title)}</a>'
            f'<p class="post-summary">{html.escape(meta.description)}</p>'
            "</li>"
        )
    return f'<ul class="post-list">{"".join(items)}</ul>'


def render_index_page(units: Iterable[PageUnit], site: SiteConfig, template: str, year: str = "") -> str:
    root = "."
    ordered = sort_units(units)
    content = (
        '<div class="section-head">'
        "<h2>Latest posts</h2>"
        "</div>"
        f"{build_post_list(ordered, root)}"
    )
    return render_template(
        template,
        lang=html.escape(site.lang),
        title=html.escape(site.site_name),
        head_meta=build_head_meta(site, site.site_name, site.site_description, root, path="/"),
        root=root,
        content=content,
        site_name=html.escape(site.site_name),
        site_description=html.escape(site.site_description),
        copyright=copyright_line(site, year or footer_year(ordered, site.copyright_year)),
        extra_head=head_links(site, root),
    )


def render_not_found_page(site: SiteConfig, template: str, year: str) -> str:
    # Served from arbitrary depths by the host, so links are absolute.
    root = site.site_url or ""
    content = (
        '<div class="section-head">'
        "<h2>404</h2>"
        "<p>Page not found.</p>"
        "</div>"
        f'<a class="post-more" href="{root}/{INDEX_PATH}">Back to home</a>'
    )
    return render_template(
        template,
        lang=html.escape(site.lang),
        title=html.escape(f"404 | {site.site_name}"),
        head_meta='<meta name="robots" content="noindex" />',
        root=root,
        content=content,
        site_name=html.escape(site.site_name),
        site_description=html.escape(site.site_description),
        copyright=copyright_line(site, year),
        extra_head=head_links(site, root),
    )


def render_sitemap(paths: list[str], site: SiteConfig, lastmod: Optional[dict[str, dt.date]] = None) -> str:
    lastmod = lastmod or {}
    items = []
    for path in paths:
        loc = site.site_url + "/" if path == INDEX_PATH else join_url(site.site_url, path)
        lines = ["<url>", f"<loc>{html.escape(loc)}</loc>"]
        if path in lastmod:
            lines.append(f"<lastmod>{lastmod[path].isoformat()}</lastmod>")
        lines.append("</url>")
        items.append("\n".join(lines))
    return "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">',
            "\n".join(items),
            "</urlset>",
        ]
    )


def build_posts(
    output_dir: Path,
    units: list[PageUnit],
    site: SiteConfig,
    template: str,
    year: str = "",
    only_identifiers: Optional[set[str]] = None,
) -> list[Path]:
    written = []
    for unit in units:
        if only_identifiers is not None and unit.identifier not in only_identifiers:
            continue
        path = output_dir / unit.path
        write_text(path, render_post_page(unit, site, template, year))
        written.append(path)
    return written


def build_index(output_dir: Path, units: list[PageUnit], site: SiteConfig, template: str, year: str = "") -> Path:
    path = output_dir / INDEX_PATH
    write_text(path, render_index_page(units, site, template, year))
    return path


def build_404(output_dir: Path, site: SiteConfig, template: str, year: str) -> Path:
    path = output_dir / "404.html"
    write_text(path, render_not_found_page(site, template, year))
    return path


def build_sitemap(output_dir: Path, paths: list[str], units: list[PageUnit], site: SiteConfig) -> Optional[Path]:
    if not site.site_url:
        return None
    lastmod = {unit.path: unit.metadata.published for unit in units}
    path = output_dir / "sitemap.xml"
    write_text(path, render_sitemap(paths, site, lastmod))
    return path
