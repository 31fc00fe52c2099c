from __future__ import annotations

from pathlib import Path

from typer.testing import CliRunner

from app.cli.main import app
from conftest import JPEG_BYTES

runner = CliRunner()


def _write(tmp_path: Path, data: bytes) -> Path:
    path = tmp_path / "book.epub"
    path.write_bytes(data)
    return path


def test_metadata_command(tmp_path: Path, sample_epub: bytes) -> None:
    result = runner.invoke(app, ["metadata", str(_write(tmp_path, sample_epub))])
    assert result.exit_code == 0, result.output
    assert "publisher" in result.output


def test_cover_command_writes_image(tmp_path: Path, sample_epub: bytes) -> None:
    out = tmp_path / "cover.jpg"
    result = runner.invoke(app, ["cover", str(_write(tmp_path, sample_epub)), "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_bytes() == JPEG_BYTES


def test_cover_command_prints_data_uri(tmp_path: Path, sample_epub: bytes) -> None:
    result = runner.invoke(app, ["cover", str(_write(tmp_path, sample_epub))])
    assert result.exit_code == 0, result.output
    assert result.output.startswith("data:image/jpeg;base64,")


def test_pages_command(tmp_path: Path, sample_epub: bytes) -> None:
    out = tmp_path / "pages"
    result = runner.invoke(app, ["pages", str(_write(tmp_path, sample_epub)), "-o", str(out)])
    assert result.exit_code == 0, result.output
    assert sorted(p.name for p in out.iterdir()) == ["page_001.html", "page_002.html"]
    assert "data:image/png;base64," in (out / "page_001.html").read_text(encoding="utf-8")


def test_styles_command(tmp_path: Path, sample_epub: bytes) -> None:
    result = runner.invoke(app, ["styles", str(_write(tmp_path, sample_epub))])
    assert result.exit_code == 0, result.output
    assert "p { margin: 0; }" in result.output


def test_invalid_archive_exits_with_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["metadata", str(_write(tmp_path, b"garbage"))])
    assert result.exit_code == 1


def test_version_flag_is_not_supported() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code != 0
