from __future__ import annotations

import datetime as dt
import html
import json
import math
from pathlib import Path

from .config import SiteConfig
from .content import Post, slugify, tag_slugs
from .layout import render_page
from .render import write_text
from .socials import build_social_list
from .status import build_status_badge
from .utils import join_url, rfc822_date

HOME_POST_LIMIT = 5


def tag_slug(tag: str, slugs: dict[str, str] | None) -> str:
    if slugs and tag in slugs:
        return slugs[tag]
    return slugify(tag)


def build_tag_chips(tags: tuple[str, ...], root: str, slugs: dict[str, str] | None = None) -> str:
    return " ".join(
        f'<a class="chip" href="{root}/tags/{tag_slug(tag, slugs)}.html">{html.escape(tag)}</a>' for tag in tags
    )


def build_post_cards(posts: list[Post], root: str, slugs: dict[str, str] | None = None) -> str:
    if not posts:
        return '<p class="empty">No posts yet.</p>'
    cards = []
    for post in posts:
        url = f"{root}/posts/{post.slug}.html"
        cards.append(
            '<article class="post-card">'
            '<div class="post-meta">'
            f'<time class="post-date" datetime="{post.date_str}">{post.date_str}</time>'
            f'<span class="post-words">{post.words} words</span>'
            f'<span class="post-tags">{build_tag_chips(post.tags, root, slugs)}</span>'
            "</div>"
            f'<h2 class="post-title"><a href="{url}">{html.escape(post.title)}</a></h2>'
            f'<p class="post-summary">{html.escape(post.summary)}</p>'
            "</article>"
        )
    return "\n".join(cards)


def build_section_head(title: str, description: str = "") -> str:
    desc = f"<p>{html.escape(description)}</p>" if description else ""
    return f'<div class="section-head"><h1>{html.escape(title)}</h1>{desc}</div>'


def blog_page_name(page: int) -> str:
    return "index.html" if page == 1 else f"page-{page}.html"


def build_pagination(page: int, total_pages: int) -> str:
    if total_pages <= 1:
        return ""
    items = []
    if page > 1:
        items.append(f'<a class="page-link" href="./{blog_page_name(page - 1)}">Previous</a>')
    else:
        items.append('<span class="page-link is-disabled">Previous</span>')
    numbers = []
    for num in range(1, total_pages + 1):
        if num == page:
            numbers.append(f'<span class="page-number is-active">{num}</span>')
        else:
            numbers.append(f'<a class="page-number" href="./{blog_page_name(num)}">{num}</a>')
    items.append(f'<div class="page-numbers">{"".join(numbers)}</div>')
    if page < total_pages:
        items.append(f'<a class="page-link" href="./{blog_page_name(page + 1)}">Next</a>')
    else:
        items.append('<span class="page-link is-disabled">Next</span>')
    return f'<nav class="pagination">{"".join(items)}</nav>'


def build_home(
    base_template: str,
    output_dir: Path,
    config: SiteConfig,
    posts: list[Post],
    slugs: dict[str, str] | None = None,
) -> None:
    root = "."
    home = config.home
    intro = f'<div class="intro">{config.intro_html}</div>' if config.intro_html else ""
    latest = ""
    if posts:
        latest = (
            '<section class="latest">'
            f"<h2>{html.escape(config.blog.title)}</h2>"
            f'<div class="post-grid">{build_post_cards(posts[:HOME_POST_LIMIT], root, slugs)}</div>'
            f'<a class="post-more" href="{root}/blog/index.html">All posts</a>'
            "</section>"
        )
    content = (
        build_section_head(home.title or config.title, config.description)
        + intro
        + build_social_list(home.socials)
        + latest
    )
    html_doc = render_page(base_template, config, root, config.title, content)
    write_text(output_dir / "index.html", html_doc)


def build_blog(
    base_template: str,
    output_dir: Path,
    config: SiteConfig,
    posts: list[Post],
    slugs: dict[str, str] | None = None,
) -> int:
    root = ".."
    per_page = max(1, config.posts_per_page)
    total_pages = max(1, math.ceil(len(posts) / per_page))
    for page in range(1, total_pages + 1):
        start = (page - 1) * per_page
        page_posts = posts[start : start + per_page]
        content = (
            build_section_head(config.blog.title, config.blog.description)
            + f'<div class="post-grid">{build_post_cards(page_posts, root, slugs)}</div>'
            + build_pagination(page, total_pages)
        )
        page_title = f"{config.blog.title} | {config.title}"
        if page > 1:
            page_title = f"{config.blog.title} (page {page}) | {config.title}"
        html_doc = render_page(base_template, config, root, page_title, content)
        write_text(output_dir / "blog" / blog_page_name(page), html_doc)
    return total_pages


def build_posts(
    base_template: str,
    output_dir: Path,
    config: SiteConfig,
    posts: list[Post],
    slugs: dict[str, str] | None = None,
) -> None:
    root = ".."
    for post in posts:
        toc = ""
        if post.toc and "<li" in post.toc:
            toc = f'<aside class="post-toc"><h2>Contents</h2>{post.toc}</aside>'
        content = (
            '<article class="post">'
            f'<h1 class="post-title">{html.escape(post.title)}</h1>'
            '<div class="post-meta">'
            f'<time class="post-date" datetime="{post.date_str}">{post.date_str}</time>'
            f'<span class="post-words">{post.words} words</span>'
            f'<span class="post-tags">{build_tag_chips(post.tags, root, slugs)}</span>'
            "</div>"
            f"{toc}"
            f'<div class="post-body">{post.content}</div>'
            f'<div class="post-footer"><a href="{root}/blog/index.html">Back to blog</a></div>'
            "</article>"
        )
        html_doc = render_page(base_template, config, root, f"{post.title} | {config.title}", content)
        write_text(output_dir / "posts" / f"{post.slug}.html", html_doc)


def build_tags(
    base_template: str,
    output_dir: Path,
    config: SiteConfig,
    tag_map: dict[str, list[Post]],
    slugs: dict[str, str] | None = None,
) -> None:
    root = ".."
    if slugs is None:
        slugs = tag_slugs(tag_map)
    for tag, posts in sorted(tag_map.items(), key=lambda x: x[0].lower()):
        content = build_section_head(f"#{tag}", f"{len(posts)} posts tagged {tag}.") + (
            f'<div class="post-grid">{build_post_cards(posts, root, slugs)}</div>'
        )
        html_doc = render_page(base_template, config, root, f"{tag} | {config.title}", content)
        write_text(output_dir / "tags" / f"{tag_slug(tag, slugs)}.html", html_doc)


def build_project_cards(config: SiteConfig) -> str:
    if not config.project.projects:
        return '<p class="empty">No projects yet.</p>'
    cards = []
    for project in config.project.projects:
        name = html.escape(project.name)
        if project.href:
            name = f'<a href="{html.escape(project.href)}">{name}</a>'
        links = ""
        if project.repo_link:
            links = f'<a class="project-repo" href="{html.escape(project.repo_link)}">Source</a>'
        cards.append(
            '<article class="project-card">'
            f'<div class="project-head"><h2 class="project-name">{name}</h2>'
            f"{build_status_badge(project.status)}</div>"
            f'<p class="project-description">{html.escape(project.description)}</p>'
            f"{links}"
            "</article>"
        )
    return "\n".join(cards)


def build_projects(base_template: str, output_dir: Path, config: SiteConfig) -> None:
    root = ".."
    content = build_section_head(config.project.title, config.project.description) + (
        f'<div class="project-grid">{build_project_cards(config)}</div>'
    )
    html_doc = render_page(base_template, config, root, f"{config.project.title} | {config.title}", content)
    write_text(output_dir / "project" / "index.html", html_doc)


def build_search(base_template: str, output_dir: Path, config: SiteConfig) -> None:
    root = "."
    content = build_section_head("Search", "Filter posts by title, summary, date, or tag.") + (
        '<div class="search-bar">'
        '<input id="search-input" class="search-input" type="search" placeholder="Type to search..." />'
        '<div id="search-status" class="search-status">Type to filter posts.</div>'
        "</div>"
        '<div id="search-results" class="post-grid"></div>'
    )
    extra_head = f'<script src="{root}/js/search.js" defer></script>'
    html_doc = render_page(base_template, config, root, f"Search | {config.title}", content, extra_head)
    write_text(output_dir / "search.html", html_doc)


def build_search_index(output_dir: Path, posts: list[Post], slugs: dict[str, str] | None = None) -> None:
    index = [
        {
            "title": post.title,
            "url": f"posts/{post.slug}.html",
            "summary": post.summary,
            "date": post.date_str,
            "tags": [{"name": tag, "slug": tag_slug(tag, slugs)} for tag in post.tags],
        }
        for post in posts
    ]
    write_text(output_dir / "search-index.json", json.dumps(index, indent=2, ensure_ascii=True))


def build_404(base_template: str, output_dir: Path, config: SiteConfig) -> None:
    root = "."
    content = build_section_head("404", "Page not found.") + (
        f'<p><a class="post-more" href="{root}/index.html">Back to home</a></p>'
    )
    html_doc = render_page(base_template, config, root, f"404 | {config.title}", content)
    write_text(output_dir / "404.html", html_doc)


def build_rss(output_dir: Path, config: SiteConfig, posts: list[Post]) -> None:
    if not config.site_url:
        return
    site_url = config.site_url.rstrip("/")
    items = []
    for post in posts[: config.feed_limit]:
        link = join_url(site_url, f"posts/{post.slug}.html")
        items.append(
            "\n".join(
                [
                    "<item>",
                    f"<title>{html.escape(post.title)}</title>",
                    f"<link>{link}</link>",
                    f"<guid>{link}</guid>",
                    f"<pubDate>{rfc822_date(post.date)}</pubDate>",
                    f"<description>{html.escape(post.summary)}</description>",
                    *(f"<category>{html.escape(tag)}</category>" for tag in post.tags),
                    "</item>",
                ]
            )
        )
    last_build = rfc822_date(posts[0].date if posts else dt.datetime.now(dt.timezone.utc))
    rss = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<rss version="2.0">',
            "<channel>",
            f"<title>{html.escape(config.title)}</title>",
            f"<link>{site_url}/</link>",
            f"<description>{html.escape(config.description)}</description>",
            f"<language>{html.escape(config.language)}</language>",
            f"<lastBuildDate>{last_build}</lastBuildDate>",
            "\n".join(items),
            "</channel>",
            "</rss>",
        ]
    )
    write_text(output_dir / "rss.xml", rss)
