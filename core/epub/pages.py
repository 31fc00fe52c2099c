"""页面组装：读取所有 .html / .xhtml 页面并内联图片。

页面顺序固定为：先全部 .html，再全部 .xhtml，各自按归档枚举顺序。
所有页面并发处理，单页失败只影响该页的结果。
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from loguru import logger

from core.config import ContentEncoding, ReaderConfig
from core.epub.archive import ArchiveSnapshot, Entry, ensure_loaded
from core.epub.inliner import inline_images
from core.epub.resolver import find_by_extension


@dataclass
class RenderedPage:
    """单页渲染结果：成功时 html 有值，失败时 error 有值。"""
    path: str
    html: str | None = None
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def collect_pages(archive: ArchiveSnapshot | None, config: ReaderConfig | None = None) -> list[Entry]:
    """按扩展名依次扫描并拼接，不交错、不排序。"""
    config = config or ReaderConfig()
    pages: list[Entry] = []
    for extension in config.page_extensions:
        pages.extend(find_by_extension(archive, extension))
    return pages


async def render_page(entry: Entry, archive: ArchiveSnapshot, config: ReaderConfig) -> str:
    markup = await entry.read(ContentEncoding.TEXT)
    return await inline_images(markup, archive, config)


async def render_pages(
    archive: ArchiveSnapshot | None, config: ReaderConfig | None = None
) -> list[RenderedPage]:
    """渲染全部页面，每页一个 RenderedPage，顺序与发现顺序一致。"""
    archive = ensure_loaded(archive)
    config = config or ReaderConfig()
    entries = collect_pages(archive, config)
    total = len(entries)

    async def render_one(idx: int, entry: Entry) -> RenderedPage:
        logger.debug("start  [{}/{}] {}", idx + 1, total, entry.path)
        try:
            html = await render_page(entry, archive, config)
        except Exception as e:
            logger.error("error  [{}/{}] {}  {}", idx + 1, total, entry.path, e)
            return RenderedPage(path=entry.path, error=e)
        logger.debug("done   [{}/{}] {}", idx + 1, total, entry.path)
        return RenderedPage(path=entry.path, html=html)

    results = await asyncio.gather(*(render_one(i, e) for i, e in enumerate(entries)))

    failed = sum(1 for r in results if not r.ok)
    logger.info("pages rendered  total={} errors={}", total, failed)
    return list(results)


async def render_all_pages(
    archive: ArchiveSnapshot | None, config: ReaderConfig | None = None
) -> list[str]:
    """渲染全部页面并返回 HTML 字符串列表。

    所有页面都结束后，如有失败页，抛出第一个失败页的原始异常。
    """
    results = await render_pages(archive, config)
    for result in results:
        if result.error is not None:
            raise result.error
    return [r.html for r in results]
