import json
import logging
from typing import Optional, Tuple, Union
from urllib.parse import quote

from fastapi import APIRouter, Cookie, Depends, Form, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from .catalog import CatalogSource
from .config import settings
from .database import recent_logs
from .errors import CatalogFetchError, InsufficientWordsError
from .globals import catalog_source, session_store, templates
from .models import GameSnapshot
from .sessions import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter()


# --- Dependencies ---
def get_session_id(
    session_id: Optional[str] = Cookie(None, alias=settings.SESSION_COOKIE_NAME)
) -> Optional[str]:
    return session_id


def get_session_store() -> SessionStore:
    return session_store


def get_catalog_source() -> CatalogSource:
    return catalog_source()


def _no_session() -> JSONResponse:
    return JSONResponse({"error": "Session invalid"}, status_code=401)


def _set_session_cookie(response: Response, session_id: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session_id,
        httponly=True,
        samesite="Lax",
    )


async def _open_game(
    region: Optional[str],
    session_id: Optional[str],
    store: SessionStore,
    source: CatalogSource,
) -> Tuple[Optional[str], Union[GameSnapshot, JSONResponse]]:
    """Fetches the catalog and starts a new game in place of the old one.

    Returns the new session id with its first snapshot, or ``None`` with the
    error response.
    """
    try:
        catalog = await run_in_threadpool(source.fetch_word_catalog, region or None)
    except CatalogFetchError as e:
        logger.error(f"Catalog fetch failed: {e}")
        return None, JSONResponse({"error": str(e)}, status_code=502)

    store.drop(session_id)
    new_id, engine = store.create()
    result = engine.start(catalog)
    if isinstance(result, InsufficientWordsError):
        store.drop(new_id)
        return None, JSONResponse(
            {
                "error": str(result),
                "required": result.required,
                "available": result.available,
            },
            status_code=409,
        )
    return new_id, result


# --- JSON API ---
@router.get("/api/regions")
async def get_regions(source: CatalogSource = Depends(get_catalog_source)):
    try:
        return await run_in_threadpool(source.get_regions)
    except CatalogFetchError as e:
        logger.error(f"Region listing failed: {e}")
        return JSONResponse({"error": str(e)}, status_code=502)


@router.post("/api/game/start", response_model=GameSnapshot)
async def start_game(
    response: Response,
    region: Optional[str] = Form(None),
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    source: CatalogSource = Depends(get_catalog_source),
):
    new_id, result = await _open_game(region, session_id, store, source)
    if new_id is None:
        return result
    _set_session_cookie(response, new_id)
    return result


@router.get("/api/game", response_model=GameSnapshot)
async def get_game(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    engine = store.get(session_id)
    if engine is None:
        return _no_session()
    return engine.snapshot()


@router.post("/api/game/answer", response_model=GameSnapshot)
async def submit_answer(
    selected_id: int = Form(...),
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    engine = store.get(session_id)
    if engine is None:
        return _no_session()
    engine.submit_answer(selected_id)
    return engine.snapshot()


@router.post("/api/game/restart", response_model=GameSnapshot)
async def restart_game(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    engine = store.get(session_id)
    if engine is None:
        return _no_session()
    engine.restart()
    return engine.snapshot()


@router.post("/api/reset")
async def reset_session(
    response: Response,
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    store.drop(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"status": "success"}


@router.get("/api/logs")
async def get_logs(limit: int = 50):
    """Latest game log rows; only served in debug mode."""
    if not settings.DEBUG:
        return JSONResponse({"error": "Not found"}, status_code=404)
    return await run_in_threadpool(recent_logs, limit)


# --- HTML page ---
@router.get("/", response_class=HTMLResponse)
async def game_page(
    request: Request,
    error: Optional[str] = None,
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    source: CatalogSource = Depends(get_catalog_source),
):
    engine = store.get(session_id)
    regions = []
    if engine is None:
        try:
            regions = await run_in_threadpool(source.get_regions)
        except CatalogFetchError as e:
            error = error or str(e)
    return templates.TemplateResponse(
        request,
        "game.html",
        {
            "snapshot": engine.snapshot() if engine else None,
            "regions": regions,
            "error": error,
            "lives_per_game": settings.LIVES_PER_GAME,
            "refresh_seconds": max(settings.NEXT_ROUND_DELAY_MS // 1000, 1),
        },
    )


@router.post("/play/start", response_class=RedirectResponse)
async def play_start(
    region: Optional[str] = Form(None),
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
    source: CatalogSource = Depends(get_catalog_source),
):
    new_id, result = await _open_game(region, session_id, store, source)
    if new_id is None:
        message = json.loads(result.body)["error"]
        return RedirectResponse(url=f"/?error={quote(message)}", status_code=302)

    redirect = RedirectResponse(url="/", status_code=302)
    _set_session_cookie(redirect, new_id)
    return redirect


@router.post("/play/answer", response_class=RedirectResponse)
async def play_answer(
    selected_id: int = Form(...),
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    engine = store.get(session_id)
    if engine is not None:
        engine.submit_answer(selected_id)
    return RedirectResponse(url="/", status_code=302)


@router.post("/play/restart", response_class=RedirectResponse)
async def play_restart(
    session_id: Optional[str] = Depends(get_session_id),
    store: SessionStore = Depends(get_session_store),
):
    engine = store.get(session_id)
    if engine is not None:
        engine.restart()
    return RedirectResponse(url="/", status_code=302)
