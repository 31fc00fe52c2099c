"""按扩展名或路径片段在归档中定位条目。

路径片段匹配是子串匹配：多个条目都包含片段时取枚举顺序中的第一个
（例如不同目录下的两个 cover.jpg），结果确定但不保证是期望的那一个。
"""

from __future__ import annotations

import httpx

from core.epub.archive import ArchiveSnapshot, Entry, ensure_loaded
from core.errors import MalformedURLError


def find_by_extension(archive: ArchiveSnapshot | None, suffix: str) -> list[Entry]:
    """返回所有路径以 suffix 结尾的非目录条目，无匹配时返回空列表。"""
    archive = ensure_loaded(archive)
    return [e for e in archive.files() if e.path.endswith(suffix)]


def find_by_path_fragment(archive: ArchiveSnapshot | None, fragment: str) -> Entry | None:
    """返回第一个路径包含 fragment 的非目录条目。"""
    archive = ensure_loaded(archive)
    return next((e for e in archive.files() if fragment in e.path), None)


def extract_file_name(url: str, base_url: str | None = None) -> str:
    """解析 URL，返回路径最后一个 "/" 之后的部分。

    给出 base_url 时，相对引用先按浏览器的方式补全为绝对 URL。
    """
    if not url:
        raise MalformedURLError(url, "empty reference")
    try:
        parsed = httpx.URL(url)
        if base_url is not None:
            parsed = httpx.URL(base_url).join(parsed)
    except (httpx.InvalidURL, TypeError) as e:
        raise MalformedURLError(url, str(e)) from e

    if not parsed.scheme:
        raise MalformedURLError(url, "missing scheme")

    path = parsed.path
    return path[path.rfind("/") + 1:]
