"""
Careers Site Backend: Landing Page Route
==========================================

What:  Serves public/index.html at GET /.
How:   FileResponse for the page; CSS/JS under public/assets are mounted
       as StaticFiles at /assets by the application factory.
"""

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import FileResponse

from app.exceptions import NotFoundError

router = APIRouter(tags=["Site"])


@router.get("/", include_in_schema=False)
async def landing_page(request: Request) -> FileResponse:
    index = Path(request.app.state.public_dir) / "index.html"
    if not index.is_file():
        raise NotFoundError(context={"path": str(index)})
    return FileResponse(index, media_type="text/html")
