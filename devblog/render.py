from __future__ import annotations

import re
import shutil
from pathlib import Path

IMG_SRC_RE = re.compile(r'<img([^>]*?)src="([^"]+)"', re.IGNORECASE)
TAG_RE = re.compile(r"<[^>]+>")
PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


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


def render_template(template: str, **context: str) -> str:
    """Fill ``{{name}}`` placeholders in a single pass.

    Values are inserted verbatim and never rescanned, so page content that
    happens to contain ``{{...}}`` is left alone. Unknown placeholders become
    empty strings.
    """

    return PLACEHOLDER_RE.sub(lambda match: context.get(match.group(1), ""), template)


def read_template(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def write_text(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def copy_static(static_dir: Path, output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    for item in static_dir.iterdir():
        dest = output_dir / item.name
        if item.is_dir():
            shutil.copytree(item, dest, dirs_exist_ok=True)
        else:
            shutil.copy2(item, dest)
