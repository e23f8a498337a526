from __future__ import annotations

import datetime as dt
import html

from pygments.formatters import HtmlFormatter

from .config import SiteConfig
from .render import render_template
from .socials import build_social_list

CODE_STYLES = {"light": "default", "dark": "monokai"}


def page_href(root: str, path: str) -> str:
    """Resolve a site-absolute route like ``/blog`` against a relative root."""
    if path.startswith(("http://", "https://", "mailto:", "#")):
        return path
    path = path.strip("/")
    if not path:
        return f"{root}/index.html"
    if "." in path.rsplit("/", 1)[-1]:
        return f"{root}/{path}"
    return f"{root}/{path}/index.html"


def build_header(config: SiteConfig, root: str) -> str:
    header = config.header
    logo = ""
    if header.logo:
        logo_src = header.logo
        if not logo_src.startswith(("http://", "https://")):
            logo_src = f"{root}/{logo_src.lstrip('/')}"
        logo = f'<img class="site-logo" src="{html.escape(logo_src)}" alt="" width="32" height="32">'
    links = [
        f'<a class="nav-link" href="{html.escape(page_href(root, route.path))}">{html.escape(route.name)}</a>'
        for route in header.routes
    ]
    if config.search.enabled:
        links.append(f'<a class="nav-link" href="{root}/search.html">Search</a>')
    return (
        '<header class="site-header">'
        f'<a class="brand" href="{root}/index.html">{logo}'
        f'<span class="brand-title">{html.escape(header.title or config.title)}</span></a>'
        f'<nav class="site-nav">{"".join(links)}</nav>'
        "</header>"
    )


def build_footer(config: SiteConfig, year: int = 0) -> str:
    if not config.footer.show:
        return ""
    year = year or dt.datetime.now().year
    owner = html.escape(config.author or config.title)
    parts = [
        build_social_list(config.home.socials, is_footer=True),
        f'<p class="copyright">&copy; {year} {owner}</p>',
    ]
    if config.footer.show_powered_by:
        parts.append('<p class="powered-by">Powered by devblog</p>')
    return f'<footer class="site-footer">{"".join(part for part in parts if part)}</footer>'


def build_back_to_top() -> str:
    return (
        '<button class="back-to-top" type="button" data-back-to-top aria-label="Back to top" hidden>'
        "&uarr;</button>"
    )


def code_stylesheet(theme: str) -> str:
    style = CODE_STYLES.get(theme, CODE_STYLES["light"])
    return HtmlFormatter(style=style).get_style_defs(".codehilite")


def render_page(
    base_template: str,
    config: SiteConfig,
    root: str,
    title: str,
    content: str,
    extra_head: str = "",
) -> str:
    return render_template(
        base_template,
        lang=html.escape(config.language),
        theme=config.theme,
        title=html.escape(title),
        description=html.escape(config.description),
        author=html.escape(config.author),
        root=root,
        extra_head=extra_head,
        header=build_header(config, root),
        content=content,
        footer=build_footer(config),
        analytics=config.analytics_html,
        back_to_top=build_back_to_top(),
    )
