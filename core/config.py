"""全局配置模型。"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ContentEncoding(str, Enum):
    """读取归档条目时的内容形式。"""

    TEXT = "text"
    BINARY = "binary"
    BASE64 = "base64"

    @classmethod
    def _missing_(cls, value: object) -> ContentEncoding | None:
        # "string" 与 "text" 等价
        if isinstance(value, str) and value.lower() == "string":
            return cls.TEXT
        return None


@dataclass
class ReaderConfig:
    text_encoding: str = "utf-8"
    # 解析 <img src> 时使用的文档基地址，相对引用据此补全为绝对 URL
    base_url: str = "http://localhost/"
    html_parser: str = "lxml"

    manifest_extension: str = ".opf"
    # 顺序即页面输出顺序：先全部 .html，再全部 .xhtml
    page_extensions: tuple[str, ...] = (".html", ".xhtml")
    stylesheet_extension: str = ".css"


# data URI 中使用的注册子类型（其余扩展名原样使用）
IMAGE_SUBTYPES: dict[str, str] = {
    "jpg": "jpeg",
    "svg": "svg+xml",
    "tif": "tiff",
}
