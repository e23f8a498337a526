"""Tests for loading and building the site configuration."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from devblog.config import (
    DEFAULT_THEME,
    CommentConfig,
    HomeConfig,
    Route,
    SiteConfig,
    build_site_config,
    load_config,
    resolve_analytics,
    resolve_intro_html,
)


class TestLoadConfig:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert load_config(tmp_path / "nope.toml") == {}

    def test_toml(self, site_dir: Path) -> None:
        data = load_config(site_dir / "site.toml")
        assert data["title"] == "Ada.Dev"
        assert list(data["home"]["socials"]) == ["email", "github", "linkedin", "twitter"]

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "site.yaml"
        path.write_text("title: Yaml Blog\ntheme: light\n", encoding="utf-8")
        assert load_config(path) == {"title": "Yaml Blog", "theme": "light"}

    def test_empty_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "site.yml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == {}

    def test_json(self, tmp_path: Path) -> None:
        path = tmp_path / "site.json"
        path.write_text(json.dumps({"author": "Ada"}), encoding="utf-8")
        assert load_config(path) == {"author": "Ada"}

    def test_invalid_json_exits(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        path = tmp_path / "site.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "Invalid JSON" in capsys.readouterr().err

    def test_yaml_list_exits(self, tmp_path: Path) -> None:
        path = tmp_path / "site.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(SystemExit):
            load_config(path)

    def test_invalid_toml_exits(self, tmp_path: Path) -> None:
        path = tmp_path / "site.toml"
        path.write_text("title = \n", encoding="utf-8")
        with pytest.raises(SystemExit):
            load_config(path)


class TestBuildSiteConfig:
    def test_empty_mapping_gives_defaults(self) -> None:
        config = build_site_config({})
        assert isinstance(config, SiteConfig)
        assert config.theme == DEFAULT_THEME
        assert config.header.routes == ()
        assert dict(config.home.socials) == {}
        assert config.project.projects == ()
        assert config.comment.enabled is False
        assert config.search.enabled is False
        assert config.footer.show is True

    def test_full_config(self, site_dir: Path) -> None:
        config = build_site_config(load_config(site_dir / "site.toml"))
        assert config.author == "Ada Example"
        assert config.theme == "light"
        assert config.header.routes == (Route("Blog", "/blog"), Route("Projects", "/project"))
        assert list(config.home.socials) == ["email", "github", "linkedin", "twitter"]
        assert config.project.projects[0].repo_link == "https://github.example/ada/engine"
        assert config.project.projects[1].status == "retired"
        assert config.search.enabled is True
        assert config.search.engine == "cmdk"

    def test_unknown_theme_falls_back(self) -> None:
        assert build_site_config({"theme": "sepia"}).theme == DEFAULT_THEME
        assert build_site_config({"theme": "LIGHT"}).theme == "light"

    def test_incomplete_entries_are_dropped(self) -> None:
        config = build_site_config(
            {
                "header": {"routes": [{"name": "Blog"}, "junk", {"name": "About", "path": "/about"}]},
                "project": {"projects": [{"description": "no name"}, {"name": "Kept"}]},
            }
        )
        assert config.header.routes == (Route("About", "/about"),)
        assert [project.name for project in config.project.projects] == ["Kept"]

    def test_wrong_section_types_are_ignored(self) -> None:
        config = build_site_config({"home": "oops", "footer": [1, 2], "search": None})
        assert config.home.title == ""
        assert config.footer.show is True
        assert config.search.enabled is False

    def test_footer_flags(self) -> None:
        config = build_site_config({"footer": {"isShow": False, "isShowPoweredBy": "no"}})
        assert config.footer.show is False
        assert config.footer.show_powered_by is False

    def test_comment_providers(self) -> None:
        config = build_site_config(
            {
                "comment": {
                    "enabled": True,
                    "engine": "giscus",
                    "giscus": {"repo": "me/blog", "mapping": "pathname"},
                    "utterances": {"issue-term": "pathname"},
                }
            }
        )
        assert config.comment.enabled is True
        assert set(config.comment.providers) == {"giscus", "utterances"}
        assert config.comment.settings["repo"] == "me/blog"

    def test_comment_settings_for_missing_engine(self) -> None:
        config = build_site_config({"comment": {"engine": "disqus"}})
        assert dict(config.comment.settings) == {}

    def test_build_section(self) -> None:
        config = build_site_config(
            {"build": {"output": "public", "posts_per_page": "0", "site_url": "https://a.dev/"}}
        )
        assert config.output_dir == "public"
        assert config.posts_per_page == 1
        assert config.site_url == "https://a.dev/"


class TestImmutability:
    def test_section_defaults_are_empty(self) -> None:
        assert dict(HomeConfig().socials) == {}
        assert dict(CommentConfig().providers) == {}
        assert dict(CommentConfig().settings) == {}
        assert HomeConfig() == HomeConfig()

    def test_record_is_frozen(self) -> None:
        config = build_site_config({"title": "x"})
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.title = "y"  # type: ignore[misc]

    def test_socials_are_read_only(self) -> None:
        config = build_site_config({"home": {"socials": {"github": "https://g"}}})
        with pytest.raises(TypeError):
            config.home.socials["github"] = "https://evil"  # type: ignore[index]

    def test_source_mapping_changes_do_not_leak(self) -> None:
        raw = {"home": {"socials": {"github": "https://g"}}}
        config = build_site_config(raw)
        raw["home"]["socials"]["github"] = ""
        assert config.home.socials["github"] == "https://g"

    def test_provider_settings_are_read_only(self) -> None:
        config = build_site_config({"comment": {"engine": "giscus", "giscus": {"repo": "a/b"}}})
        with pytest.raises(TypeError):
            config.comment.settings["repo"] = "c/d"  # type: ignore[index]


class TestResolveFiles:
    def test_intro_markdown(self, site_dir: Path) -> None:
        html = resolve_intro_html("intro.md", site_dir)
        assert "<strong>intro</strong>" in html

    def test_intro_mdx_drops_imports(self, tmp_path: Path) -> None:
        (tmp_path / "intro.mdx").write_text("import A from './a'\n\nHi there.\n", encoding="utf-8")
        html = resolve_intro_html("intro.mdx", tmp_path)
        assert "import" not in html
        assert "<p>Hi there.</p>" in html

    def test_intro_text_is_escaped(self, tmp_path: Path) -> None:
        (tmp_path / "intro.txt").write_text("a < b\nnext", encoding="utf-8")
        assert resolve_intro_html("intro.txt", tmp_path) == "<p>a &lt; b<br>next</p>"

    def test_missing_intro_warns(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert resolve_intro_html("gone.md", tmp_path) == ""
        assert "Intro file not found" in capsys.readouterr().err

    def test_no_intro(self, tmp_path: Path) -> None:
        assert resolve_intro_html("", tmp_path) == ""

    def test_analytics_inline_wins(self, tmp_path: Path) -> None:
        (tmp_path / "a.html").write_text("<script>file</script>", encoding="utf-8")
        raw = {"analytics_html": "<script>inline</script>", "analytics_file": "a.html"}
        assert resolve_analytics(raw, tmp_path) == "<script>inline</script>"

    def test_analytics_file(self, tmp_path: Path) -> None:
        (tmp_path / "a.html").write_text("<script>file</script>", encoding="utf-8")
        assert resolve_analytics({"analytics_file": "a.html"}, tmp_path) == "<script>file</script>"

    def test_missing_analytics_warns(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        assert resolve_analytics({"analytics_file": "gone.html"}, tmp_path) == ""
        assert "Analytics file not found" in capsys.readouterr().err

    def test_no_analytics(self, tmp_path: Path) -> None:
        assert resolve_analytics({}, tmp_path) == ""

    def test_build_site_config_resolves_files(self, site_dir: Path) -> None:
        config = build_site_config(load_config(site_dir / "site.toml"), site_dir)
        assert "<strong>intro</strong>" in config.intro_html
        assert config.analytics_html == ""


class TestSampleConfig:
    ROOT = Path(__file__).resolve().parent.parent

    def test_shipped_site_toml(self) -> None:
        config = build_site_config(load_config(self.ROOT / "site.toml"), self.ROOT)
        assert config.header.logo == "/logo.png"
        assert (self.ROOT / "static" / "logo.png").is_file()
        assert len(config.project.projects) == 12
        assert config.project.projects[0].name == "Nebulla"
        assert config.comment.providers["giscus"]["inputPosition"] == "top"
        assert config.comment.providers["utterances"]["crossorigin"] == "anonymous"
        assert "<" in config.intro_html
