import re

import pytest

from blogsite.cli import build_parser, build_site, main, resolve_workers
from blogsite.errors import MissingRoute, SiteError


@pytest.fixture
def project(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


def run(argv):
    return main(["--content", "blog", "--output", "dist", *argv])


def test_end_to_end_single_post(project, write_post, capsys):
    write_post("first.md", body="hello")
    assert run([]) == 0
    dist = project / "dist"
    post = (dist / "posts" / "first.html").read_text(encoding="utf-8")
    assert "<title>T | Blog</title>" in post
    assert '<meta property="og:title" content="T" />' in post
    assert "<p>hello</p>" in post
    index = (dist / "index.html").read_text(encoding="utf-8")
    assert re.findall(r'<a class="post-link" href="[^"]+">([^<]+)</a>', index) == ["T"]
    assert sorted(path.name for path in (dist / "posts").iterdir()) == ["first.html"]
    assert (dist / "404.html").exists()
    assert "Site generated in: dist" in capsys.readouterr().out


def test_drafts_get_no_page(project, write_post):
    write_post("live.md")
    write_post("draft.md", published=None)
    assert run([]) == 0
    assert not (project / "dist" / "posts" / "draft.html").exists()
    assert "draft" not in (project / "dist" / "index.html").read_text(encoding="utf-8")


def test_zero_qualifying_entries(project, write_post):
    write_post("draft.md", published=None)
    assert run([]) == 0
    index = (project / "dist" / "index.html").read_text(encoding="utf-8")
    assert '<ul class="post-list"></ul>' in index
    assert not (project / "dist" / "posts").exists()


def test_build_is_idempotent(project, write_post):
    write_post("a.md", published="2024-01-01", body="# A\n\nalpha")
    write_post("b.md", published="2025-06-26", og_image="custom.png", body="beta")

    def snapshot():
        dist = project / "dist"
        return {path.relative_to(dist).as_posix(): path.read_bytes() for path in dist.rglob("*") if path.is_file()}

    assert run(["--site-url", "https://example.com", "--build-workers", "4"]) == 0
    first = snapshot()
    assert run(["--site-url", "https://example.com", "--build-workers", "4"]) == 0
    assert snapshot() == first
    assert "sitemap.xml" in first


def test_sitemap_needs_site_url(project, write_post, capsys):
    write_post("a.md")
    assert run([]) == 0
    assert not (project / "dist" / "sitemap.xml").exists()
    assert "Sitemap skipped" in capsys.readouterr().err


def test_sitemap_contains_published_routes(project, write_post):
    write_post("a.md")
    write_post("hidden.md", published=None)
    assert run(["--site-url", "https://example.com"]) == 0
    sitemap = (project / "dist" / "sitemap.xml").read_text(encoding="utf-8")
    assert "https://example.com/posts/a.html" in sitemap
    assert "hidden" not in sitemap


def test_schema_violation_fails_the_build(project, content_dir, write_post, capsys):
    write_post("good.md")
    (content_dir / "bad.md").write_text("---\ntitle: T\n---\nbody", encoding="utf-8")
    assert run([]) == 1
    err = capsys.readouterr().err
    assert "Build failed: Invalid front-matter in bad.md" in err
    assert not (project / "dist").exists()


def test_missing_content_dir(project, capsys):
    assert run([]) == 1
    assert "Content directory not found" in capsys.readouterr().err


def test_config_file_supplies_defaults(project, write_post):
    write_post("a.md")
    (project / "site.toml").write_text(
        'site_name = "From Config"\ncontent = "blog"\noutput = "public_html"\n', encoding="utf-8"
    )
    assert main([]) == 0
    index = (project / "public_html" / "index.html").read_text(encoding="utf-8")
    assert "<title>From Config</title>" in index


def test_invalid_config_fails(project, capsys):
    (project / "site.json").write_text("{broken", encoding="utf-8")
    assert main(["--config", "site.json"]) == 1
    assert "Invalid config file" in capsys.readouterr().err


def test_static_assets_are_copied(project, write_post):
    write_post("a.md")
    static = project / "public"
    static.mkdir()
    (static / "og-default.png").write_bytes(b"png")
    assert run([]) == 0
    assert (project / "dist" / "og-default.png").read_bytes() == b"png"


def test_only_rewrites_named_posts(project, write_post):
    write_post("a.md")
    write_post("b.md")
    assert run([]) == 0
    (project / "dist" / "posts" / "a.html").unlink()
    (project / "dist" / "posts" / "b.html").write_text("stale", encoding="utf-8")
    assert run(["--only", "a"]) == 0
    assert (project / "dist" / "posts" / "a.html").exists()
    assert (project / "dist" / "posts" / "b.html").read_text(encoding="utf-8") == "stale"


def test_only_unknown_identifier(project, write_post):
    write_post("a.md")
    write_post("draft.md", published=None)
    args = build_parser({}, "site.toml").parse_args(["--content", "blog", "--only", "draft"])
    with pytest.raises(MissingRoute):
        build_site(args)


def test_refuses_to_clean_outside_project(project, tmp_path_factory, write_post):
    write_post("a.md")
    outside = tmp_path_factory.mktemp("elsewhere")
    args = build_parser({}, "site.toml").parse_args(["--content", "blog", "--output", str(outside)])
    with pytest.raises(SiteError):
        build_site(args)


def test_resolve_workers():
    assert resolve_workers(3) == 3
    assert resolve_workers(1000) == 32
    assert resolve_workers(0) >= 1
    assert resolve_workers("bad") >= 1


def test_file_names_with_punctuation_get_reachable_routes(project, write_post):
    write_post("Release Notes #1.md", title="Notes")
    assert run([]) == 0
    index = (project / "dist" / "index.html").read_text(encoding="utf-8")
    hrefs = re.findall(r'<a class="post-link" href="([^"]+)">', index)
    assert hrefs == ["./posts/release-notes-1.html"]
    assert [path.name for path in (project / "dist" / "posts").iterdir()] == ["release-notes-1.html"]


def test_undecodable_content_fails_cleanly(project, content_dir, capsys):
    (content_dir / "bad.md").write_bytes(b"---\ntitle: \xff\xfe\n---\nbody")
    assert run([]) == 1
    assert "Build failed: Could not read bad.md" in capsys.readouterr().err


def test_missing_template_fails_cleanly(project, write_post, capsys):
    write_post("a.md")
    assert run(["--template", "missing.html"]) == 1
    assert "Build failed: Could not read missing.html" in capsys.readouterr().err


def test_empty_site_footer_uses_configured_year(project, write_post):
    write_post("draft.md", published=None)
    assert run(["--copyright-year", "2020"]) == 0
    index = (project / "dist" / "index.html").read_text(encoding="utf-8")
    assert "<p>&copy; 2020 Blog</p>" in index


def test_sitemap_link_only_when_sitemap_is_written(project, write_post):
    write_post("a.md")
    assert run([]) == 0
    assert 'rel="sitemap"' not in (project / "dist" / "index.html").read_text(encoding="utf-8")
    assert run(["--site-url", "https://example.com"]) == 0
    assert '<link rel="sitemap" href="./sitemap.xml" />' in (project / "dist" / "index.html").read_text(
        encoding="utf-8"
    )
