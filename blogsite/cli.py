from __future__ import annotations

import argparse
import os
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path

from .config import DEFAULT_OG_IMAGE, SiteConfig, load_config
from .errors import SiteError
from .loader import load_entries
from .pages import build_404, build_index, build_posts, build_sitemap, footer_year
from .render import copy_static, make_converter, read_template
from .routes import find_unit, generate_page_units, route_paths
from .utils import clean_output_dir, parse_bool, parse_int, parse_str_list, write_nojekyll

MAX_WORKERS = 32


@dataclass
class BuildResult:
    output_dir: Path
    entries: int = 0
    drafts: int = 0
    written: list[Path] = field(default_factory=list)


def resolve_workers(value: object) -> int:
    workers = parse_int(value, 0)
    if workers <= 0:
        workers = os.cpu_count() or 1
    return max(1, min(workers, MAX_WORKERS))


def build_site(args: argparse.Namespace) -> BuildResult:
    project_root = Path(getattr(args, "project_root", None) or Path.cwd())
    content_dir = Path(args.content)
    static_dir = Path(args.static)
    output_dir = Path(args.output)
    template_path = Path(args.template) if getattr(args, "template", "") else None
    only = set(getattr(args, "only", None) or [])

    site = SiteConfig.from_args(args)
    template = read_template(template_path)
    convert = make_converter(parse_str_list(args.markdown_extensions) or None)

    entries = load_entries(content_dir)
    units = generate_page_units(entries, convert=convert, workers=resolve_workers(args.build_workers))
    for identifier in sorted(only):
        find_unit(units, identifier)

    result = BuildResult(output_dir=output_dir, entries=len(entries), drafts=len(entries) - len(units))
    if only:
        year = footer_year(units, site.copyright_year)
        result.written.extend(build_posts(output_dir, units, site, template, year, only_identifiers=only))
        return result

    if parse_bool(args.clean):
        clean_output_dir(output_dir, project_root)
    output_dir.mkdir(parents=True, exist_ok=True)
    if static_dir.exists():
        copy_static(static_dir, output_dir)
    if parse_bool(args.write_nojekyll):
        write_nojekyll(output_dir)

    year = footer_year(units, site.copyright_year)
    result.written.extend(build_posts(output_dir, units, site, template, year))
    result.written.append(build_index(output_dir, units, site, template, year))
    if parse_bool(args.enable_404):
        result.written.append(build_404(output_dir, site, template, year))
    if parse_bool(args.enable_sitemap):
        sitemap = build_sitemap(output_dir, route_paths(units), units, site)
        if sitemap is not None:
            result.written.append(sitemap)
        else:
            print("Sitemap skipped: site_url is not configured.", file=sys.stderr)
    return result


def build_parser(config: dict, config_path: str) -> argparse.ArgumentParser:
    def cfg_value(key: str, default: object) -> object:
        value = config.get(key)
        return default if value is None else value

    def cfg_str(key: str, default: str) -> str:
        return str(cfg_value(key, default))

    def cfg_bool(key: str, default: bool) -> bool:
        return parse_bool(cfg_value(key, default))

    def cfg_int(key: str, default: int) -> int:
        return parse_int(cfg_value(key, default), default)

    parser = argparse.ArgumentParser(description="Build the blog from a folder of Markdown posts.")
    parser.add_argument("--config", default=config_path, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--content", default=cfg_str("content", "blog"), help="Directory containing Markdown posts.")
    parser.add_argument("--static", default=cfg_str("static", "public"), help="Directory containing static assets.")
    parser.add_argument("--output", default=cfg_str("output", "dist"), help="Output directory for the site.")
    parser.add_argument("--template", default=cfg_str("template", ""), help="Custom layout template (HTML).")
    parser.add_argument("--site-name", default=cfg_str("site_name", "Blog"), help="Site title.")
    parser.add_argument("--site-description", default=cfg_str("site_description", ""), help="Site description.")
    parser.add_argument(
        "--site-url",
        default=cfg_str("site_url", ""),
        help="Public site URL used for canonical links, OG tags and the sitemap.",
    )
    parser.add_argument(
        "--default-og-image",
        default=cfg_str("default_og_image", DEFAULT_OG_IMAGE),
        help="Social preview image used when a post sets no ogImage.",
    )
    parser.add_argument("--lang", default=cfg_str("lang", "en"), help="Value of the html lang attribute.")
    parser.add_argument(
        "--copyright-year",
        default=cfg_str("copyright_year", ""),
        help="Footer year used when no post is published yet.",
    )
    parser.add_argument(
        "--markdown-extensions",
        default=cfg_value("markdown_extensions", None),
        help="Comma separated Python-Markdown extensions (default: fenced_code,tables,toc,codehilite).",
    )
    parser.add_argument(
        "--build-workers",
        default=cfg_int("build_workers", 0),
        type=int,
        help="Number of worker threads for Markdown conversion (0 = auto).",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("clean", True),
        help="Clean output directory before build.",
    )
    parser.add_argument(
        "--enable-sitemap",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_sitemap", True),
        help="Generate sitemap.xml (requires --site-url).",
    )
    parser.add_argument(
        "--enable-404",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("enable_404", True),
        help="Generate 404.html.",
    )
    parser.add_argument(
        "--write-nojekyll",
        action=argparse.BooleanOptionalAction,
        default=cfg_bool("write_nojekyll", False),
        help="Write .nojekyll in the output directory.",
    )
    parser.add_argument(
        "--only",
        nargs="+",
        metavar="ID",
        help="Rewrite only the pages of these post identifiers.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument(
        "--config",
        default="site.toml",
        help="Path to site config file (TOML/YAML/JSON).",
    )
    pre_args, _ = pre_parser.parse_known_args(argv)
    try:
        config = load_config(Path(pre_args.config))
    except SiteError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        return 1

    args = build_parser(config, pre_args.config).parse_args(argv)
    start = time.perf_counter()
    try:
        result = build_site(args)
    except SiteError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        return 1
    elapsed = time.perf_counter() - start
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"{result.entries - result.drafts} published, {result.drafts} drafts, {len(result.written)} files written.")
    print(f"Site generated in: {result.output_dir}")
    return 0
