"""EPUB 内容提取 API 路由。"""

from __future__ import annotations

from fastapi import APIRouter, Form, HTTPException, UploadFile

from core.config import ReaderConfig
from core.errors import EpubReaderError
from core.session import EpubSession

router = APIRouter(prefix="/api", tags=["extract"])


async def _open_session(file: UploadFile, config: ReaderConfig | None = None) -> EpubSession:
    """读取上传文件并加载为会话，非法归档返回 422。"""
    session = EpubSession(config)
    try:
        await session.load(await file.read())
    except EpubReaderError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return session


@router.post("/metadata")
async def read_metadata(file: UploadFile) -> dict:
    """上传 EPUB，返回书名与出版社。"""
    async with await _open_session(file) as session:
        try:
            meta = await session.read_metadata()
        except EpubReaderError as e:
            raise HTTPException(status_code=422, detail=str(e))
    return {"title": meta.title, "publisher": meta.publisher}


@router.post("/cover")
async def read_cover(file: UploadFile) -> dict:
    """上传 EPUB，返回封面图片的 base64 data URI。"""
    async with await _open_session(file) as session:
        try:
            data_uri = await session.read_cover_data_uri()
        except EpubReaderError as e:
            raise HTTPException(status_code=422, detail=str(e))
    return {"data_uri": data_uri}


@router.post("/pages")
async def render_pages(
    file: UploadFile,
    base_url: str = Form("http://localhost/"),
) -> dict:
    """上传 EPUB，返回内联图片后的全部页面；单页失败只在该页记录 error。"""
    config = ReaderConfig(base_url=base_url)
    async with await _open_session(file, config) as session:
        results = await session.render_pages()
    return {
        "pages": [
            {
                "path": r.path,
                "html": r.html,
                "error": f"{type(r.error).__name__}: {r.error}" if r.error else None,
            }
            for r in results
        ]
    }


@router.post("/stylesheets")
async def fetch_stylesheets(file: UploadFile) -> dict:
    """上传 EPUB，返回全部 CSS 文本。"""
    async with await _open_session(file) as session:
        sheets = await session.fetch_stylesheets()
    return {"stylesheets": sheets}
