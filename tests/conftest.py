from __future__ import annotations

import io
import zipfile
from typing import Callable

import pytest

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01"
JPEG_BYTES = b"\xff\xd8\xff\xe0\x00\x10JFIF\x00"


def _opf(
    *,
    version: str | None = "2.0",
    title: str | None = "T",
    publisher: str | None = "P",
    cover_id: str = "cover",
    cover_href: str | None = "images/cover.jpg",
) -> str:
    version_attr = f' version="{version}"' if version is not None else ""
    meta = ""
    if title is not None:
        meta += f"<dc:title>{title}</dc:title>"
    if publisher is not None:
        meta += f"<dc:publisher>{publisher}</dc:publisher>"
    href_attr = f' href="{cover_href}"' if cover_href is not None else ""
    return (
        '<?xml version="1.0" encoding="utf-8"?>'
        f'<package xmlns="http://www.idpf.org/2007/opf" unique-identifier="BookId"{version_attr}>'
        '<metadata xmlns:dc="http://purl.org/dc/elements/1.1/">'
        f"{meta}"
        "</metadata>"
        "<manifest>"
        f'<item id="{cover_id}"{href_attr} media-type="image/jpeg"/>'
        '<item id="c1" href="ch1.html" media-type="application/xhtml+xml"/>'
        "</manifest>"
        '<spine><itemref idref="c1"/></spine>'
        "</package>"
    )


def _build_epub(files: dict[str, bytes | str]) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        zf.writestr("mimetype", b"application/epub+zip", compress_type=zipfile.ZIP_STORED)
        for path, content in files.items():
            if path.endswith("/"):
                zf.writestr(zipfile.ZipInfo(path), b"")
            else:
                zf.writestr(path, content)
    return buf.getvalue()


@pytest.fixture
def make_opf() -> Callable[..., str]:
    return _opf


@pytest.fixture
def build_epub() -> Callable[[dict[str, bytes | str]], bytes]:
    return _build_epub


@pytest.fixture
def sample_epub() -> bytes:
    """一本包含清单、两页、一张插图、一张封面和一个样式表的小书。"""
    return _build_epub({
        "OEBPS/": b"",
        "OEBPS/book.opf": _opf(),
        "OEBPS/ch1.html": '<html><body><p>One</p><img src="http://x/img1.png"></body></html>',
        "OEBPS/ch2.xhtml": (
            '<html xmlns="http://www.w3.org/1999/xhtml"><body>'
            '<p>Two</p><img src="../images/missing.png"/></body></html>'
        ),
        "OEBPS/images/img1.png": PNG_BYTES,
        "OEBPS/images/cover.jpg": JPEG_BYTES,
        "OEBPS/styles/main.css": "p { margin: 0; }",
    })
