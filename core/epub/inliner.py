"""把页面中的 <img> 引用替换为内联 base64 data URI。

找不到对应文件的图片保持原样（尽力而为，不视为错误）；
引用本身不是合法 URL 时抛出 MalformedURLError，整页失败。
"""

from __future__ import annotations

import asyncio

from bs4 import BeautifulSoup, Tag
from loguru import logger

from core.config import IMAGE_SUBTYPES, ContentEncoding, ReaderConfig
from core.epub.archive import ArchiveSnapshot, Entry, ensure_loaded
from core.epub.resolver import extract_file_name, find_by_path_fragment


async def image_data_uri(entry: Entry) -> str:
    """读取图片条目，返回 data:image/{ext};base64,{payload}。"""
    payload = await entry.read(ContentEncoding.BASE64)
    subtype = IMAGE_SUBTYPES.get(entry.extension, entry.extension)
    return f"data:image/{subtype};base64,{payload}"


async def inline_images(
    markup: str,
    archive: ArchiveSnapshot | None,
    config: ReaderConfig | None = None,
) -> str:
    """解析 HTML，内联所有图片，返回 body 的内部 HTML。"""
    archive = ensure_loaded(archive)
    config = config or ReaderConfig()

    soup = BeautifulSoup(markup, config.html_parser)
    images = soup.find_all("img")

    # 各图片互不依赖，并发解析；每个协程只回写自己持有的那个元素
    await asyncio.gather(*(_inline_one(img, archive, config) for img in images))

    body = soup.body
    if body is None:
        return soup.decode_contents(formatter="html5")
    return body.decode_contents(formatter="html5")


async def _inline_one(img: Tag, archive: ArchiveSnapshot, config: ReaderConfig) -> None:
    src = img.get("src") or ""
    file_name = extract_file_name(src, config.base_url)
    if not file_name:
        logger.debug("image  skip   {!r} (no file name)", src)
        return

    entry = find_by_path_fragment(archive, file_name)
    if entry is None:
        logger.debug("image  miss   {}", file_name)
        return

    img["src"] = await image_data_uri(entry)
    logger.debug("image  inline {} <- {}", file_name, entry.path)
