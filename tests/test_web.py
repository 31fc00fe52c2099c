from __future__ import annotations

from fastapi.testclient import TestClient

from app.web.app import app

client = TestClient(app)


def _upload(data: bytes) -> dict:
    return {"file": ("book.epub", data, "application/epub+zip")}


def test_root() -> None:
    assert client.get("/").json()["message"] == "epub-reader API"


def test_metadata(sample_epub: bytes) -> None:
    resp = client.post("/api/metadata", files=_upload(sample_epub))
    assert resp.status_code == 200
    assert resp.json() == {"title": "T", "publisher": "P"}


def test_cover(sample_epub: bytes) -> None:
    resp = client.post("/api/cover", files=_upload(sample_epub))
    assert resp.status_code == 200
    assert resp.json()["data_uri"].startswith("data:image/jpeg;base64,")


def test_pages_report_errors_per_page(build_epub) -> None:
    data = build_epub({
        "bad.html": '<img src="http://example.com:port/a.png">',
        "good.html": "<p>ok</p>",
    })
    resp = client.post("/api/pages", files=_upload(data))
    assert resp.status_code == 200
    pages = resp.json()["pages"]
    assert pages[0]["path"] == "bad.html"
    assert pages[0]["html"] is None
    assert pages[0]["error"].startswith("MalformedURLError")
    assert pages[1] == {"path": "good.html", "html": "<p>ok</p>", "error": None}


def test_stylesheets(sample_epub: bytes) -> None:
    resp = client.post("/api/stylesheets", files=_upload(sample_epub))
    assert resp.json() == {"stylesheets": ["p { margin: 0; }"]}


def test_missing_manifest_is_unprocessable(build_epub) -> None:
    resp = client.post("/api/metadata", files=_upload(build_epub({"ch1.html": "<p/>"})))
    assert resp.status_code == 422


def test_invalid_archive_is_unprocessable() -> None:
    resp = client.post("/api/metadata", files=_upload(b"garbage"))
    assert resp.status_code == 422
