from __future__ import annotations

import json
import tomllib
from dataclasses import dataclass
from pathlib import Path

import yaml

from .errors import ConfigError
from .utils import parse_bool

DEFAULT_OG_IMAGE = "og-default.png"


@dataclass(frozen=True)
class SiteConfig:
    site_name: str = "Blog"
    site_description: str = ""
    site_url: str = ""
    default_og_image: str = DEFAULT_OG_IMAGE
    lang: str = "en"
    copyright_year: str = ""
    enable_sitemap: bool = True

    @property
    def has_sitemap(self) -> bool:
        return self.enable_sitemap and bool(self.site_url)

    @classmethod
    def from_args(cls, args: object) -> "SiteConfig":
        return cls(
            site_name=str(getattr(args, "site_name", cls.site_name)),
            site_description=str(getattr(args, "site_description", cls.site_description) or ""),
            site_url=str(getattr(args, "site_url", "") or "").strip().rstrip("/"),
            default_og_image=str(getattr(args, "default_og_image", "") or DEFAULT_OG_IMAGE),
            lang=str(getattr(args, "lang", "") or "en"),
            copyright_year=str(getattr(args, "copyright_year", "") or "").strip(),
            enable_sitemap=parse_bool(getattr(args, "enable_sitemap", True)),
        )


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(path, str(exc)) from exc
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(path, str(exc)) from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(path, str(exc)) from exc
        if data is None:
            return {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(path, str(exc)) from exc
    if not isinstance(data, dict):
        raise ConfigError(path, "config must be a mapping")
    return data
