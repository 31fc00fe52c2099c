"""读取器异常体系。"""

from __future__ import annotations


class EpubReaderError(Exception):
    """所有读取器异常的基类。"""


class ArchiveNotLoadedError(EpubReaderError):
    """在 load 完成之前调用了依赖归档的操作。"""

    def __init__(self, message: str = "File not loaded yet.") -> None:
        super().__init__(message)


class MalformedArchiveError(EpubReaderError):
    """输入不是合法的 zip 归档。"""


class MalformedURLError(EpubReaderError, ValueError):
    """图片引用不是合法的 URL。"""

    def __init__(self, url: str, reason: str = "") -> None:
        self.url = url
        message = f"Malformed URL: {url!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class ManifestError(EpubReaderError):
    """与 OPF 清单相关的错误。"""


class ManifestNotFoundError(ManifestError):
    def __init__(self, message: str = "归档中未找到 .opf 清单文件") -> None:
        super().__init__(message)


class MalformedManifestError(ManifestError):
    """清单内容无法解析为 XML。"""


class ManifestFieldMissingError(ManifestError):
    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"清单中缺少 {field} 元素")


class CoverNotFoundError(ManifestError):
    """封面标识、href 属性或封面文件缺失。"""
