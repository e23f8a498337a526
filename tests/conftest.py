from __future__ import annotations

from pathlib import Path

import pytest

SITE_TOML = """\
author = "Ada Example"
title = "Ada.Dev"
description = "Notes and projects"
theme = "light"

[header]
title = "Ada.Dev"
routes = [
    { name = "Blog", path = "/blog" },
    { name = "Projects", value = "/project" },
]

[home]
title = "Welcome"
intro = "intro.md"

[home.socials]
email = "ada@example.com"
github = ""
linkedin = "https://linkedin.example/ada"
twitter = ""

[blog]
title = "Writing"

[[project.projects]]
name = "Engine"
description = "Analytical engine emulator"
href = "https://engine.example"
github = "https://github.example/ada/engine"
status = "dev"

[[project.projects]]
name = "Loom"
status = "retired"

[search]
enabled = true
engine = "cmdk"
"""


def write_post(posts_dir: Path, name: str, front_matter: str, body: str = "Body text.") -> Path:
    posts_dir.mkdir(parents=True, exist_ok=True)
    path = posts_dir / name
    path.write_text(f"---\n{front_matter.strip()}\n---\n\n{body}\n", encoding="utf-8")
    return path


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    (tmp_path / "site.toml").write_text(SITE_TOML, encoding="utf-8")
    (tmp_path / "intro.md").write_text("Hello from the **intro**.\n", encoding="utf-8")
    posts = tmp_path / "posts"
    write_post(posts, "first.md", "title: First post\ndate: 2024-01-05\ntags: [python, notes]\nsummary: The first one.")
    write_post(posts, "second.mdx", "title: Second post\ndate: 2024-02-01\ntags: python", "import X from './x'\n\nMore text.")
    write_post(posts, "secret.md", "title: Secret draft\ndate: 2024-03-01\ndraft: true")
    return tmp_path


@pytest.fixture
def post_writer():
    return write_post
