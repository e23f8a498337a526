from __future__ import annotations

import argparse
import sys
import time
from dataclasses import replace
from pathlib import Path

from .config import SiteConfig, build_site_config, load_config
from .content import collect_tags, load_posts, published_posts, tag_slugs
from .layout import code_stylesheet
from .pages import (
    build_404,
    build_blog,
    build_home,
    build_posts,
    build_projects,
    build_rss,
    build_search,
    build_search_index,
    build_tags,
)
from .render import copy_static, read_template, write_text
from .utils import clean_output_dir

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATES = PACKAGE_DIR / "templates"
BUNDLED_STATIC = PACKAGE_DIR / "static"


def build_site(config: SiteConfig, templates_dir: Path, clean: bool = True, project_root: Path | None = None) -> int:
    """Write the whole site for ``config``; returns the number of published posts."""
    project_root = project_root or Path.cwd()
    posts_dir = Path(config.posts_dir)
    static_dir = Path(config.static_dir)
    output_dir = Path(config.output_dir)

    if not posts_dir.exists():
        print(f"Posts directory not found: {posts_dir}", file=sys.stderr)
        sys.exit(1)
    base_path = templates_dir / "base.html"
    if not base_path.exists():
        print(f"Template not found: {base_path}", file=sys.stderr)
        sys.exit(1)

    all_posts = load_posts(posts_dir, config.toc_depth)
    posts = published_posts(all_posts)
    drafts = len(all_posts) - len(posts)
    if drafts:
        print(f"Skipping {drafts} draft(s).")
    tag_map = collect_tags(posts)
    slugs = tag_slugs(tag_map)

    if clean:
        clean_output_dir(output_dir, project_root)
    output_dir.mkdir(parents=True, exist_ok=True)

    copy_static(BUNDLED_STATIC, output_dir)
    if static_dir.exists():
        copy_static(static_dir, output_dir)
    write_text(output_dir / "css" / "code.css", code_stylesheet(config.theme))

    base_template = read_template(base_path)
    build_home(base_template, output_dir, config, posts, slugs)
    build_blog(base_template, output_dir, config, posts, slugs)
    build_posts(base_template, output_dir, config, posts, slugs)
    build_tags(base_template, output_dir, config, tag_map, slugs)
    build_projects(base_template, output_dir, config)
    if config.search.enabled:
        build_search(base_template, output_dir, config)
        build_search_index(output_dir, posts, slugs)
    build_404(base_template, output_dir, config)
    build_rss(output_dir, config, posts)
    return len(posts)


def main(argv: list[str] | None = None) -> None:
    pre_parser = argparse.ArgumentParser(add_help=False)
    pre_parser.add_argument("--config", default="site.toml", help="Path to site config file (TOML/YAML/JSON).")
    pre_args, _ = pre_parser.parse_known_args(argv)
    config_path = Path(pre_args.config)
    raw = load_config(config_path)
    config = build_site_config(raw, config_path.resolve().parent)

    parser = argparse.ArgumentParser(description="Personal blog generator.")
    parser.add_argument("--config", default=pre_args.config, help="Path to site config file (TOML/YAML/JSON).")
    parser.add_argument("--posts", default=config.posts_dir, help="Directory containing Markdown/MDX posts.")
    parser.add_argument("--static", default=config.static_dir, help="Directory containing static assets.")
    parser.add_argument("--output", default=config.output_dir, help="Output directory for the site.")
    parser.add_argument("--site-url", default=config.site_url, help="Public site URL used for the RSS feed.")
    parser.add_argument(
        "--templates",
        default=str(DEFAULT_TEMPLATES),
        help="Directory holding base.html.",
    )
    parser.add_argument(
        "--clean",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Clean output directory before build.",
    )
    args = parser.parse_args(argv)
    config = replace(
        config,
        posts_dir=args.posts,
        static_dir=args.static,
        output_dir=args.output,
        site_url=(args.site_url or "").strip(),
    )

    start = time.perf_counter()
    count = build_site(config, Path(args.templates), clean=args.clean)
    elapsed = time.perf_counter() - start
    print(f"Built {count} post(s) in {elapsed:.2f}s.")
    print(f"Site generated in: {args.output}")
