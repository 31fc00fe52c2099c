"""epub-reader CLI 入口。

命令：
  er <epub>             渲染全部页面（简写，等价于 er pages <epub>）
  er pages <epub>       渲染全部页面，图片内联为 base64，输出为 HTML 文件
  er metadata <epub>    显示书名与出版社
  er cover <epub>       输出封面 data URI，或保存封面图片
  er styles <epub>      输出全部 CSS 样式表
"""

from __future__ import annotations

import asyncio
import base64
import sys
from pathlib import Path
from typing import Optional

import typer

# 若第一个参数看起来是 epub 文件（而非子命令），自动补全 "pages"
# 使得 `er book.epub` 等价于 `er pages book.epub`
_SUBCOMMANDS = {"pages", "metadata", "cover", "styles", "--help", "-h"}
if len(sys.argv) > 1 and sys.argv[1] not in _SUBCOMMANDS and sys.argv[1].endswith(".epub"):
    sys.argv.insert(1, "pages")
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from loguru import logger

from core.config import ReaderConfig
from core.errors import EpubReaderError
from core.session import EpubSession

app = typer.Typer(
    name="er",
    help="epub-reader: EPUB 页面、样式、元数据与封面提取工具",
    add_completion=False,
)
console = Console()

# 移除 loguru 默认的 stderr handler，改为通过 Rich Console 输出
# 避免 loguru 直接写 stderr 时破坏 Rich Progress 进度条的渲染
logger.remove()
_LOG_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level:<7}</level> | {message}"
_log_handler_id = logger.add(
    lambda msg: console.log(msg, end=""),
    format=_LOG_FORMAT,
    level="WARNING",
    colorize=True,
)


def _set_verbose(verbose: bool) -> None:
    global _log_handler_id
    if not verbose:
        return
    logger.remove(_log_handler_id)
    _log_handler_id = logger.add(
        lambda msg: console.log(msg, end=""),
        format=_LOG_FORMAT,
        level="DEBUG",
        colorize=True,
    )


def _run(epub: Path, config: ReaderConfig, action):
    """加载 epub 后执行 action(session)，统一处理读取错误。"""
    async def run():
        async with EpubSession(config) as session:
            await session.load_path(epub)
            return await action(session)

    try:
        return asyncio.run(run())
    except EpubReaderError as e:
        console.print(f"[red]读取失败：{e}[/red]")
        raise typer.Exit(1)


@app.command()
def pages(
    epub: Path = typer.Argument(..., help="输入 EPUB 文件路径", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="输出目录（默认：原文件名_pages）"),
    base_url: str = typer.Option("http://localhost/", "--base-url", help="解析相对图片引用的基地址"),
    encoding: str = typer.Option("utf-8", "--encoding", help="页面文本编码"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """渲染全部页面，图片内联为 base64 data URI。"""
    _set_verbose(verbose)
    if output is None:
        output = epub.parent / f"{epub.stem}_pages"

    config = ReaderConfig(text_encoding=encoding, base_url=base_url)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"渲染 {epub.name}", total=None)
        results = _run(epub, config, lambda s: s.render_pages())

    output.mkdir(parents=True, exist_ok=True)
    written = 0
    for idx, result in enumerate(results, 1):
        if not result.ok:
            console.print(f"[red]错误[/red] {result.path}: {result.error}")
            continue
        (output / f"page_{idx:03d}.html").write_text(result.html, encoding="utf-8")
        written += 1

    console.print(f"\n[green]✓ 渲染完成[/green] {written}/{len(results)} 页 → {output}")
    if written < len(results):
        raise typer.Exit(1)


@app.command()
def metadata(
    epub: Path = typer.Argument(..., help="输入 EPUB 文件路径", exists=True, dir_okay=False),
) -> None:
    """显示书名与出版社。"""
    meta = _run(epub, ReaderConfig(), lambda s: s.read_metadata())

    table = Table(title=epub.name, show_header=True)
    table.add_column("字段", style="cyan", width=10)
    table.add_column("值", style="white")
    table.add_row("title", meta.title)
    table.add_row("publisher", meta.publisher)
    console.print(table)


@app.command()
def cover(
    epub: Path = typer.Argument(..., help="输入 EPUB 文件路径", exists=True, dir_okay=False),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="保存封面图片的路径（默认输出 data URI）"),
) -> None:
    """输出封面 data URI，或把封面图片保存到文件。"""
    data_uri = _run(epub, ReaderConfig(), lambda s: s.read_cover_data_uri())

    if output is None:
        typer.echo(data_uri)
        return
    payload = data_uri.split(",", 1)[1]
    output.write_bytes(base64.b64decode(payload))
    console.print(f"[green]✓ 封面已保存[/green] → {output}")


@app.command()
def styles(
    epub: Path = typer.Argument(..., help="输入 EPUB 文件路径", exists=True, dir_okay=False),
) -> None:
    """输出全部 CSS 样式表。"""
    sheets = _run(epub, ReaderConfig(), lambda s: s.fetch_stylesheets())
    if not sheets:
        console.print("[yellow]未找到样式表[/yellow]")
        return
    for sheet in sheets:
        typer.echo(sheet)
