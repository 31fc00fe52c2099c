"""OPF 清单读取：定位、解析，并导出元数据与封面位置。

清单每次访问都重新读取和解析，不做缓存。
"""

from __future__ import annotations

from dataclasses import dataclass

from lxml import etree

from core.config import ContentEncoding
from core.epub.archive import ArchiveSnapshot, Entry, ensure_loaded
from core.epub.resolver import find_by_extension
from core.errors import (
    CoverNotFoundError,
    MalformedManifestError,
    ManifestFieldMissingError,
    ManifestNotFoundError,
)

OPF_NS = "http://www.idpf.org/2007/opf"
DC_NS = "http://purl.org/dc/elements/1.1/"

# EPUB 2.0 的封面条目 id 为 "cover"，其余版本（含缺省）为 "cover-image"
EPUB2_VERSION = "2.0"
EPUB2_COVER_ID = "cover"
DEFAULT_COVER_ID = "cover-image"


@dataclass(frozen=True)
class Metadata:
    title: str
    publisher: str


@dataclass(frozen=True)
class CoverReference:
    absolute_path: str     # 清单中 href 的原值，按路径片段在归档中查找


def locate_manifest(archive: ArchiveSnapshot | None, extension: str = ".opf") -> Entry | None:
    """返回第一个 .opf 条目（只支持单清单）。"""
    matches = find_by_extension(archive, extension)
    return matches[0] if matches else None


async def load_manifest_document(
    archive: ArchiveSnapshot | None, extension: str = ".opf"
) -> etree._Element | None:
    """读取并解析清单，返回根元素；没有清单时返回 None。"""
    entry = locate_manifest(archive, extension)
    if entry is None:
        return None

    content = await entry.read(ContentEncoding.BINARY)
    try:
        return etree.fromstring(content)
    except etree.XMLSyntaxError as e:
        raise MalformedManifestError(f"{entry.path} 不是合法的 XML：{e}") from e


async def read_metadata(archive: ArchiveSnapshot | None, extension: str = ".opf") -> Metadata:
    archive = ensure_loaded(archive)
    root = await _require_document(archive, extension)

    return Metadata(
        title=_first_dc_text(root, "title"),
        publisher=_first_dc_text(root, "publisher"),
    )


async def read_cover_reference(
    archive: ArchiveSnapshot | None, extension: str = ".opf"
) -> CoverReference:
    archive = ensure_loaded(archive)
    root = await _require_document(archive, extension)

    cover_id = cover_id_for_version(_package_version(root))
    matches = root.xpath("//*[@id=$cover_id]", cover_id=cover_id)
    if not matches:
        raise CoverNotFoundError(f"清单中未找到 id={cover_id!r} 的元素")

    href = matches[0].get("href")
    if href is None:
        raise CoverNotFoundError(f"封面元素 {cover_id!r} 缺少 href 属性")
    return CoverReference(absolute_path=href)


def cover_id_for_version(version: str | None) -> str:
    if version == EPUB2_VERSION:
        return EPUB2_COVER_ID
    return DEFAULT_COVER_ID


# ── 内部工具函数 ────────────────────────────────────────────────────────────


async def _require_document(archive: ArchiveSnapshot, extension: str) -> etree._Element:
    root = await load_manifest_document(archive, extension)
    if root is None:
        raise ManifestNotFoundError()
    return root


def _package_version(root: etree._Element) -> str | None:
    if etree.QName(root).localname == "package":
        return root.get("version")
    package = root.find(f".//{{{OPF_NS}}}package")
    if package is None:
        package = root.find(".//package")
    return package.get("version") if package is not None else None


def _first_dc_text(root: etree._Element, name: str) -> str:
    element = root.find(f".//{{{DC_NS}}}{name}")
    if element is None:
        raise ManifestFieldMissingError(f"dc:{name}")
    return "".join(element.itertext())
