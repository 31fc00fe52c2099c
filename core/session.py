"""EPUB 读取会话：持有一个已加载的归档，对外提供全部读取操作。

会话只有两种状态：未加载（初始）与已加载。除 load 外的操作都要求已加载，
否则抛出 ArchiveNotLoadedError。重复 load 会直接替换当前归档。
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from lxml import etree
from loguru import logger

from core.config import ContentEncoding, ReaderConfig
from core.epub.archive import ArchiveSnapshot, Entry, ensure_loaded, open_archive
from core.epub.inliner import image_data_uri
from core.epub.manifest import (
    CoverReference,
    Metadata,
    load_manifest_document,
    locate_manifest,
    read_cover_reference,
    read_metadata,
)
from core.epub.pages import RenderedPage, render_all_pages, render_pages
from core.epub.resolver import find_by_extension, find_by_path_fragment
from core.errors import CoverNotFoundError


class EpubSession:
    def __init__(self, config: ReaderConfig | None = None) -> None:
        self.config = config or ReaderConfig()
        self._archive: ArchiveSnapshot | None = None

    @property
    def is_loaded(self) -> bool:
        return self._archive is not None

    @property
    def archive(self) -> ArchiveSnapshot:
        return ensure_loaded(self._archive)

    async def load(self, data: bytes) -> None:
        """加载 EPUB 字节，替换之前加载的归档。

        旧归档不会被关闭，之前取得的快照与条目仍可读取。
        """
        archive = open_archive(data, self.config.text_encoding)
        self._archive = archive
        logger.info("epub loaded  entries={}", len(archive))

    async def load_path(self, path: str | Path) -> None:
        await self.load(await asyncio.to_thread(Path(path).read_bytes))

    def close(self) -> None:
        if self._archive is not None:
            self._archive.close()
            self._archive = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        self.close()

    # ── 查找 ────────────────────────────────────────────────────────────────

    def locate_manifest_entry(self) -> Entry | None:
        return locate_manifest(self.archive, self.config.manifest_extension)

    async def list_by_extension(
        self, extension: str, encoding: ContentEncoding | str = ContentEncoding.TEXT
    ) -> list[str | bytes]:
        """读取所有以 extension 结尾的文件内容，无匹配时返回空列表。"""
        entries = find_by_extension(self.archive, extension)
        return list(await asyncio.gather(*(e.read(encoding) for e in entries)))

    async def fetch_stylesheets(self) -> list[str]:
        return await self.list_by_extension(self.config.stylesheet_extension, ContentEncoding.TEXT)

    # ── 清单 ────────────────────────────────────────────────────────────────

    async def load_manifest_document(self) -> etree._Element | None:
        return await load_manifest_document(self.archive, self.config.manifest_extension)

    async def read_metadata(self) -> Metadata:
        return await read_metadata(self.archive, self.config.manifest_extension)

    async def read_cover_reference(self) -> CoverReference:
        return await read_cover_reference(self.archive, self.config.manifest_extension)

    async def read_cover_data_uri(self) -> str:
        """返回封面图片的 base64 data URI。"""
        reference = await self.read_cover_reference()
        entry = find_by_path_fragment(self.archive, reference.absolute_path)
        if entry is None:
            raise CoverNotFoundError(f"归档中未找到封面文件 {reference.absolute_path!r}")
        return await image_data_uri(entry)

    # ── 页面 ────────────────────────────────────────────────────────────────

    async def render_pages(self) -> list[RenderedPage]:
        return await render_pages(self.archive, self.config)

    async def render_all_pages(self) -> list[str]:
        return await render_all_pages(self.archive, self.config)
