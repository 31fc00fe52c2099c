"""EPUB 归档访问：把 zip 字节解析为只读的 路径 → 条目 映射。"""

from __future__ import annotations

import asyncio
import base64
import io
import zipfile
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from loguru import logger

from core.config import ContentEncoding
from core.errors import ArchiveNotLoadedError, MalformedArchiveError


@dataclass(frozen=True)
class Entry:
    """归档中的一个文件或目录记录。"""

    path: str                  # 规范化后的 ZIP 内路径（正斜杠）
    is_dir: bool
    _zip: zipfile.ZipFile = field(repr=False, compare=False)
    _info: zipfile.ZipInfo = field(repr=False, compare=False)
    text_encoding: str = "utf-8"

    async def read(self, encoding: ContentEncoding | str = ContentEncoding.TEXT) -> str | bytes:
        """读取条目内容。

        Args:
            encoding: text 返回 str，binary 返回 bytes，base64 返回 ASCII base64 字符串
        """
        encoding = ContentEncoding(encoding)
        if self.is_dir:
            raise IsADirectoryError(self.path)

        # 解压放到工作线程，避免阻塞事件循环
        data = await asyncio.to_thread(self._zip.read, self._info)

        if encoding is ContentEncoding.BINARY:
            return data
        if encoding is ContentEncoding.BASE64:
            return base64.b64encode(data).decode("ascii")
        return data.decode(self.text_encoding, errors="replace")

    @property
    def extension(self) -> str:
        """最后一个 "." 之后的小写文本。"""
        return self.path.rsplit(".", 1)[-1].lower()


class ArchiveSnapshot(Mapping):
    """加载后的归档快照，按归档自身的枚举顺序迭代，只读。"""

    def __init__(self, zf: zipfile.ZipFile, entries: dict[str, Entry]) -> None:
        self._zip = zf
        self._entries = MappingProxyType(entries)

    def __getitem__(self, path: str) -> Entry:
        return self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def files(self) -> Iterator[Entry]:
        """只枚举非目录条目。"""
        return (e for e in self._entries.values() if not e.is_dir)

    def close(self) -> None:
        self._zip.close()


def open_archive(data: bytes, text_encoding: str = "utf-8") -> ArchiveSnapshot:
    """解析 zip 字节，返回归档快照。"""
    try:
        zf = zipfile.ZipFile(io.BytesIO(data), "r")
    except zipfile.BadZipFile as e:
        raise MalformedArchiveError(f"不是合法的 zip 归档：{e}") from e

    entries: dict[str, Entry] = {}
    for info in zf.infolist():
        path = info.filename.replace("\\", "/")
        entries[path] = Entry(
            path=path,
            is_dir=info.is_dir(),
            _zip=zf,
            _info=info,
            text_encoding=text_encoding,
        )

    logger.debug("archive opened  entries={} bytes={}", len(entries), len(data))
    return ArchiveSnapshot(zf, entries)


def ensure_loaded(archive: ArchiveSnapshot | None) -> ArchiveSnapshot:
    """归档未加载时立即失败。"""
    if archive is None:
        raise ArchiveNotLoadedError()
    return archive
