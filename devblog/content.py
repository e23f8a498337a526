from __future__ import annotations

import datetime as dt
import html as html_lib
import re
import sys
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import Path

import frontmatter
import markdown
import yaml

from .render import fix_relative_img_src, strip_tags
from .utils import parse_bool

POST_SUFFIXES = (".md", ".mdx")
SUMMARY_LENGTH = 200
LIST_MARKER_RE = re.compile(r"^(?P<indent>[ \t]*)(?:[-+*]|\d+[.)])\s+")
FENCE_RE = re.compile(r"^(?P<indent>[ \t]*)(`{3,}|~{3,})")
MDX_ESM_RE = re.compile(r"^(?:import|export)\s")
CJK_RE = re.compile(r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af]")
WORD_RE = re.compile(r"[A-Za-z0-9]+(?:'[A-Za-z0-9]+)?")


class FrontMatterError(ValueError):
    """Raised when a post's front-matter block cannot be read."""


@dataclass(frozen=True)
class Post:
    title: str
    slug: str
    date: dt.datetime
    summary: str = ""
    tags: tuple[str, ...] = ()
    draft: bool = False
    content: str = ""
    toc: str = ""
    words: int = 0
    source: str = ""

    @property
    def date_str(self) -> str:
        return self.date.strftime("%Y-%m-%d")


def slugify(text: str) -> str:
    text = text.lower()
    text = re.sub(r"[^\w]+", "-", text, flags=re.UNICODE)
    text = text.strip("-_").replace("_", "-")
    return text or "post"


def parse_list(value: object) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value if item is not None]
    else:
        text = str(value).strip()
        if text.startswith("[") and text.endswith("]"):
            text = text[1:-1]
        items = [item.strip().strip("'\"") for item in text.split(",")]
    return [item for item in items if item]


def parse_front_matter(text: str) -> tuple[dict, str]:
    """Split a document into its front-matter mapping and body.

    Documents without a complete ``---`` block come back with empty metadata.
    Invalid YAML raises :class:`FrontMatterError`.
    """

    try:
        post = frontmatter.loads(text.lstrip("\ufeff"))
    except yaml.YAMLError as exc:
        raise FrontMatterError(f"invalid front matter: {exc}") from exc
    meta = {str(key).strip().lower(): value for key, value in post.metadata.items()}
    return meta, post.content


def extract_title(meta: dict, body: str) -> tuple[str, str]:
    title = meta.get("title")
    if title is not None and str(title).strip():
        return str(title).strip(), body
    lines = body.splitlines()
    for i, line in enumerate(lines):
        stripped = line.strip()
        if stripped.startswith("# "):
            title = stripped[2:].strip() or "Untitled"
            new_body = "\n".join(lines[i + 1 :]).lstrip()
            return title, new_body
        if stripped:
            break
    return "Untitled", body


def parse_date(meta: dict, file_path: Path) -> dt.datetime:
    value = meta.get("date")
    if isinstance(value, dt.datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time())
    if value is not None:
        text = str(value).strip()
        try:
            return dt.datetime.fromisoformat(text).replace(tzinfo=None)
        except ValueError:
            pass
    return dt.datetime.fromtimestamp(file_path.stat().st_mtime)


def get_tags(meta: dict) -> tuple[str, ...]:
    tags: list[str] = []
    for tag in parse_list(meta.get("tags")):
        if tag not in tags:
            tags.append(tag)
    return tuple(tags)


def strip_mdx(text: str) -> str:
    """Drop top-level MDX ``import``/``export`` lines outside code fences."""
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in text.splitlines():
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
        elif not in_fence and MDX_ESM_RE.match(line):
            continue
        out.append(line)
    return "\n".join(out)


def normalize_list_spacing(text: str) -> str:
    lines = text.splitlines()
    out: list[str] = []
    in_fence = False
    fence_marker = ""
    for line in lines:
        fence_match = FENCE_RE.match(line)
        if fence_match:
            marker = fence_match.group(2)
            if not in_fence:
                in_fence = True
                fence_marker = marker
            elif marker == fence_marker:
                in_fence = False
                fence_marker = ""
            out.append(line)
            continue
        if in_fence:
            out.append(line)
            continue
        list_match = LIST_MARKER_RE.match(line)
        if list_match and not list_match.group("indent"):
            if out and out[-1].strip() and not LIST_MARKER_RE.match(out[-1]):
                out.append("")
        out.append(line)
    return "\n".join(out)


def count_words(text: str) -> int:
    text = html_lib.unescape(text)
    cjk_count = len(CJK_RE.findall(text))
    text = CJK_RE.sub(" ", text)
    word_count = len(WORD_RE.findall(text))
    return cjk_count + word_count


def make_summary(meta: dict, html_content: str) -> str:
    summary = meta.get("summary") or meta.get("description")
    if summary:
        return str(summary).strip()
    text = " ".join(strip_tags(html_content).split())
    return text[:SUMMARY_LENGTH] + ("..." if len(text) > SUMMARY_LENGTH else "")


def render_markdown(body: str, toc_depth: str = "2-4") -> tuple[str, str]:
    md = markdown.Markdown(
        extensions=["fenced_code", "tables", "toc", "codehilite"],
        extension_configs={
            "toc": {"toc_depth": toc_depth},
            "codehilite": {"css_class": "codehilite", "guess_lang": False},
        },
    )
    html_content = md.convert(body)
    return html_content, md.toc


def parse_post(path: Path, toc_depth: str = "2-4", source: str = "") -> Post:
    raw_text = path.read_text(encoding="utf-8")
    meta, body = parse_front_matter(raw_text)
    title, body = extract_title(meta, body)
    draft = parse_bool(meta.get("draft"))
    explicit_slug = str(meta.get("slug") or "").strip()
    slug = slugify(explicit_slug or path.stem)
    body = normalize_list_spacing(strip_mdx(body))
    html_content, toc_html = render_markdown(body, toc_depth)
    html_content = fix_relative_img_src(html_content, "..")
    return Post(
        title=title,
        slug=slug,
        date=parse_date(meta, path),
        summary=make_summary(meta, html_content),
        tags=get_tags(meta),
        draft=draft,
        content=html_content,
        toc=toc_html,
        words=count_words(strip_tags(html_content)),
        source=source or path.as_posix(),
    )


def _unique_slug(slug: str, used: set[str]) -> str:
    if slug not in used:
        return slug
    counter = 2
    while f"{slug}-{counter}" in used:
        counter += 1
    return f"{slug}-{counter}"


def load_posts(posts_dir: Path, toc_depth: str = "2-4") -> list[Post]:
    """Parse every post under ``posts_dir``, newest first.

    Drafts are included; callers decide what to publish with
    :func:`published_posts`. A file with unreadable front matter stops the
    build.
    """

    files = sorted(
        (path for path in posts_dir.rglob("*") if path.is_file() and path.suffix.lower() in POST_SUFFIXES),
        key=lambda p: p.as_posix(),
    )
    posts = []
    used_slugs: set[str] = set()
    for path in files:
        source = path.relative_to(posts_dir).as_posix()
        try:
            post = parse_post(path, toc_depth, source)
        except FrontMatterError as exc:
            print(f"Cannot parse {path}: {exc}", file=sys.stderr)
            sys.exit(1)
        slug = _unique_slug(post.slug, used_slugs)
        used_slugs.add(slug)
        if slug != post.slug:
            post = replace(post, slug=slug)
        posts.append(post)
    posts.sort(key=lambda p: p.date, reverse=True)
    return posts


def published_posts(posts: Iterable[Post]) -> list[Post]:
    return [post for post in posts if not post.draft]


def collect_tags(posts: Iterable[Post]) -> dict[str, list[Post]]:
    tag_map: dict[str, list[Post]] = {}
    for post in posts:
        for tag in post.tags:
            tag_map.setdefault(tag, []).append(post)
    return tag_map


def tag_slugs(tags: Iterable[str]) -> dict[str, str]:
    """Give every distinct tag its own page slug.

    Tags that slugify to the same name (``C++`` and ``C#``, ``Python`` and
    ``python``) get ``-2``, ``-3`` suffixes in sorted order, so the mapping is
    stable across builds.
    """

    slugs: dict[str, str] = {}
    used: set[str] = set()
    for tag in sorted(set(tags), key=lambda t: (t.lower(), t)):
        slug = _unique_slug(slugify(tag), used)
        used.add(slug)
        slugs[tag] = slug
    return slugs
