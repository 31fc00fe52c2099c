"""FastAPI Web 应用入口。"""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.web.routers.extract import router as extract_router

app = FastAPI(title="epub-reader", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(extract_router)


@app.get("/")
async def root():
    return JSONResponse({"message": "epub-reader API", "docs": "/docs"})
