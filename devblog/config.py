from __future__ import annotations

import html
import json
import sys
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Optional

import markdown
import yaml

from .content import strip_mdx
from .utils import parse_bool, parse_int

THEMES = ("light", "dark")
DEFAULT_THEME = "dark"
EMPTY_MAPPING: Mapping = MappingProxyType({})


def load_config(path: Path) -> dict:
    if not path.exists():
        return {}
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            print(f"Invalid TOML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        return data
    if suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            print(f"Invalid YAML in config file {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        if data is None:
            return {}
        if not isinstance(data, dict):
            print(f"YAML config must be a mapping: {path}", file=sys.stderr)
            sys.exit(1)
        return data
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        print(f"Invalid JSON in config file {path}: {exc}", file=sys.stderr)
        sys.exit(1)
    if not isinstance(data, dict):
        print(f"JSON config must be a mapping: {path}", file=sys.stderr)
        sys.exit(1)
    return data


@dataclass(frozen=True)
class Route:
    name: str
    path: str


@dataclass(frozen=True)
class HeaderConfig:
    logo: str = ""
    title: str = ""
    routes: tuple[Route, ...] = ()


@dataclass(frozen=True)
class HomeConfig:
    title: str = ""
    intro: str = ""
    socials: Mapping[str, str] = field(default_factory=lambda: EMPTY_MAPPING)


@dataclass(frozen=True)
class BlogConfig:
    title: str = "Blog"
    description: str = ""


@dataclass(frozen=True)
class Project:
    name: str
    description: str = ""
    href: str = ""
    repo_link: str = ""
    status: str = ""


@dataclass(frozen=True)
class ProjectConfig:
    title: str = "Projects"
    description: str = ""
    projects: tuple[Project, ...] = ()


@dataclass(frozen=True)
class CommentConfig:
    enabled: bool = False
    engine: str = ""
    providers: Mapping[str, Mapping[str, object]] = field(default_factory=lambda: EMPTY_MAPPING)

    @property
    def settings(self) -> Mapping[str, object]:
        """Settings of the selected engine, empty when it has none."""
        return self.providers.get(self.engine, EMPTY_MAPPING)


@dataclass(frozen=True)
class SearchConfig:
    enabled: bool = False
    engine: str = ""


@dataclass(frozen=True)
class FooterConfig:
    show: bool = True
    show_powered_by: bool = True


@dataclass(frozen=True)
class SiteConfig:
    """Everything the renderers know about the site.

    Built once by :func:`build_site_config` and handed to every page builder.
    Nested collections are tuples or read-only mappings so the record cannot
    drift after startup.
    """

    author: str = ""
    title: str = "devblog"
    description: str = ""
    theme: str = DEFAULT_THEME
    language: str = "en"
    github_repo: str = ""
    header: HeaderConfig = field(default_factory=HeaderConfig)
    home: HomeConfig = field(default_factory=HomeConfig)
    blog: BlogConfig = field(default_factory=BlogConfig)
    project: ProjectConfig = field(default_factory=ProjectConfig)
    comment: CommentConfig = field(default_factory=CommentConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    footer: FooterConfig = field(default_factory=FooterConfig)
    posts_dir: str = "posts"
    static_dir: str = "static"
    output_dir: str = "dist"
    site_url: str = ""
    posts_per_page: int = 8
    feed_limit: int = 20
    toc_depth: str = "2-4"
    analytics_html: str = ""
    intro_html: str = ""


def _section(raw: Mapping, key: str) -> Mapping:
    value = raw.get(key)
    return value if isinstance(value, Mapping) else {}


def _str(raw: Mapping, *keys: str, default: str = "") -> str:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return str(value).strip()
    return default


def _freeze(value: object) -> object:
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _build_routes(items: object) -> tuple[Route, ...]:
    if not isinstance(items, (list, tuple)):
        return ()
    routes = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        name = _str(item, "name")
        path = _str(item, "path", "value")
        if name and path:
            routes.append(Route(name=name, path=path))
    return tuple(routes)


def _build_socials(items: object) -> Mapping[str, str]:
    if not isinstance(items, Mapping):
        return EMPTY_MAPPING
    socials = {}
    for key, value in items.items():
        socials[str(key).strip()] = "" if value is None else str(value).strip()
    return MappingProxyType(socials)


def _build_projects(items: object) -> tuple[Project, ...]:
    if not isinstance(items, (list, tuple)):
        return ()
    projects = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        name = _str(item, "name")
        if not name:
            continue
        projects.append(
            Project(
                name=name,
                description=_str(item, "description"),
                href=_str(item, "href"),
                repo_link=_str(item, "repoLink", "repo_link", "github"),
                status=_str(item, "status"),
            )
        )
    return tuple(projects)


def _build_comment(raw: Mapping) -> CommentConfig:
    providers = {
        str(key): _freeze(value)
        for key, value in raw.items()
        if key not in {"enabled", "engine"} and isinstance(value, Mapping)
    }
    return CommentConfig(
        enabled=parse_bool(raw.get("enabled")),
        engine=_str(raw, "engine"),
        providers=MappingProxyType(providers),
    )


def build_site_config(raw: Mapping, base_dir: Optional[Path] = None) -> SiteConfig:
    """Turn a loaded config mapping into a :class:`SiteConfig`.

    Missing sections and fields fall back to defaults; nothing here raises
    for absent data. When ``base_dir`` is given, the intro and analytics files
    are resolved relative to it and rendered into the record.
    """

    header = _section(raw, "header")
    home = _section(raw, "home")
    blog = _section(raw, "blog")
    project = _section(raw, "project")
    search = _section(raw, "search")
    footer = _section(raw, "footer")
    build = _section(raw, "build")

    theme = _str(raw, "theme", default=DEFAULT_THEME).lower()
    if theme not in THEMES:
        theme = DEFAULT_THEME

    title = _str(raw, "title", default="devblog")
    defaults = SiteConfig()
    config = SiteConfig(
        author=_str(raw, "author"),
        title=title,
        description=_str(raw, "description"),
        theme=theme,
        language=_str(raw, "language", default="en") or "en",
        github_repo=_str(raw, "githubRepo", "github_repo"),
        header=HeaderConfig(
            logo=_str(header, "logo"),
            title=_str(header, "title", default=title),
            routes=_build_routes(header.get("routes")),
        ),
        home=HomeConfig(
            title=_str(home, "title"),
            intro=_str(home, "intro"),
            socials=_build_socials(home.get("socials")),
        ),
        blog=BlogConfig(
            title=_str(blog, "title", default=defaults.blog.title),
            description=_str(blog, "description"),
        ),
        project=ProjectConfig(
            title=_str(project, "title", default=defaults.project.title),
            description=_str(project, "description"),
            projects=_build_projects(project.get("projects")),
        ),
        comment=_build_comment(_section(raw, "comment")),
        search=SearchConfig(
            enabled=parse_bool(search.get("enabled")),
            engine=_str(search, "engine"),
        ),
        footer=FooterConfig(
            show=parse_bool(footer.get("isShow", footer.get("show")), default=True),
            show_powered_by=parse_bool(
                footer.get("isShowPoweredBy", footer.get("show_powered_by")), default=True
            ),
        ),
        posts_dir=_str(build, "posts", default=defaults.posts_dir),
        static_dir=_str(build, "static", default=defaults.static_dir),
        output_dir=_str(build, "output", default=defaults.output_dir),
        site_url=_str(build, "site_url"),
        posts_per_page=max(1, parse_int(build.get("posts_per_page"), defaults.posts_per_page)),
        feed_limit=max(0, parse_int(build.get("feed_limit"), defaults.feed_limit)),
        toc_depth=_str(build, "toc_depth", default=defaults.toc_depth),
    )
    if base_dir is None:
        return config
    return replace(
        config,
        intro_html=resolve_intro_html(config.home.intro, base_dir),
        analytics_html=resolve_analytics(build, base_dir),
    )


def _resolve_path(value: str, base_dir: Path) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = base_dir / path
    return path


def resolve_intro_html(intro: str, base_dir: Path) -> str:
    if not intro:
        return ""
    path = _resolve_path(intro, base_dir)
    if not path.exists():
        print(f"Intro file not found: {path}", file=sys.stderr)
        return ""
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    if suffix in {".html", ".htm"}:
        return text
    if suffix in {".md", ".mdx"}:
        md = markdown.Markdown(extensions=["fenced_code", "tables"])
        return md.convert(strip_mdx(text))
    escaped = html.escape(text).replace("\n", "<br>")
    return f"<p>{escaped}</p>"


def resolve_analytics(raw: Mapping, base_dir: Path) -> str:
    html_snippet = _str(raw, "analytics_html")
    if html_snippet:
        return html_snippet
    file_value = _str(raw, "analytics_file")
    if not file_value:
        return ""
    path = _resolve_path(file_value, base_dir)
    if not path.exists():
        print(f"Analytics file not found: {path}", file=sys.stderr)
        return ""
    return path.read_text(encoding="utf-8")
