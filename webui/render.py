"""HTML page for a directory listing."""

from __future__ import annotations

import os
import platform
import socket
from html import escape
from typing import Dict, List, Optional
from urllib.parse import urlencode

from models.listing import DirectoryEntry, ListingView, Messages, OrderDirection, OrderKey

_UNITS = ("KB", "MB", "GB", "TB")


def file_size(size: int) -> str:
    if size < 1024:
        return f"{size}bytes"
    value = size / 1024
    for unit in _UNITS:
        if value < 1024:
            return f"{value:.2f}{unit}"
        value /= 1024
    return f"{value:.2f}PB"


def host_name() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return ""


def platform_name() -> str:
    return f"{platform.system().lower()} {platform.machine().lower()}"


def _display(text: str) -> str:
    """HTML-safe text; undecodable file name bytes show as U+FFFD."""
    return escape(os.fsencode(text).decode("utf-8", "replace"))


def _href(**params: str) -> str:
    # surrogateescape turns undecodable name bytes back into their raw %XX form
    query = {k: v for k, v in params.items() if v is not None}
    return "/?" + urlencode(query, encoding="utf-8", errors="surrogateescape")


def _messages_html(messages: Messages) -> str:
    blocks: List[str] = []
    for category, items in messages.as_dict().items():
        css = "alert" if category == "Alerts" else "error"
        for text in items:
            blocks.append(f'<div class="msg {css}">{_display(text)}</div>')
    return "\n".join(blocks)


def _header_link(view: ListingView, key: OrderKey, label: str) -> str:
    marker = view.toggle_marker if view.order_key is key else ""
    arrow = ""
    if view.order_key is key:
        arrow = " &#9650;" if view.order_direction is OrderDirection.ASC else " &#9660;"
    href = _href(dir=view.current_path, o=key.value, ot=marker)
    return f'<a href="{escape(href)}">{label}</a>{arrow}'


def _entry_row(view: ListingView, entry: DirectoryEntry, download_enabled: bool) -> str:
    name = _display(entry.name)
    order = {"o": view.order_key.value}
    if entry.is_dir:
        href = _href(dir=view.current_path, op="in", folder=entry.name, **order)
        cell = f'<a class="dir" href="{escape(href)}">{name}/</a>'
        size = "-"
    else:
        if download_enabled:
            href = _href(dir=view.current_path, op="download", id=entry.name)
            cell = f'<a class="file" href="{escape(href)}">{name}</a>'
        else:
            cell = f'<span class="file">{name}</span>'
        size = file_size(entry.size)
    modified = entry.modified_at.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    return (
        f"<tr><td>{cell}</td><td>{modified}</td>"
        f'<td class="size">{size}</td></tr>'
    )


def render_page(
    view: Optional[ListingView],
    messages: Messages,
    *,
    download_enabled: bool = False,
    title: str = "Home",
    context: Optional[Dict[str, str]] = None,
) -> str:
    ctx = {"host": host_name(), "platform": platform_name()}
    ctx.update(context or {})
    body: List[str] = [_messages_html(messages)]
    if view is not None:
        up = _href(dir=view.current_path, op="up", o=view.order_key.value)
        body.append(
            f'<div class="path"><a class="up" href="{escape(up)}">..</a> '
            f"{_display(view.current_path)}</div>"
        )
        rows = "\n".join(_entry_row(view, e, download_enabled) for e in view.entries)
        body.append(
            "<table>\n<tr>"
            f"<th>{_header_link(view, OrderKey.NAME, 'Name')}</th>"
            f"<th>{_header_link(view, OrderKey.DATE, 'Modified')}</th>"
            f"<th>{_header_link(view, OrderKey.SIZE, 'Size')}</th>"
            f"</tr>\n{rows}\n</table>"
        )
    content = "\n".join(b for b in body if b)
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8" />
<title>{escape(title)} - {escape(ctx['host'])}</title>
<link rel="icon" href="/favicon.ico" />
<link rel="stylesheet" href="/css/browser.css" />
</head>
<body>
<header><h1>{escape(ctx['host'])}</h1><span class="platform">{escape(ctx['platform'])}</span></header>
<main>
{content}
</main>
<script src="/js/browser.js"></script>
</body>
</html>"""
