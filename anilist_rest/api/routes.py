from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

router = APIRouter()

WELCOME = "📺📚 Welcome to AniList Anime & Manga REST API"


@router.get("/", response_class=PlainTextResponse)
async def root():
    return WELCOME


@router.get("/healthz")
async def healthz(request: Request):
    return {"status": "ok", "service": request.app.state.settings.service_name}
