from __future__ import annotations

import asyncio
import contextlib
import logging

from fastapi import APIRouter, Query, Request, WebSocket, WebSocketDisconnect
from fastapi.responses import HTMLResponse

from coindash.dashboard.controller import Dashboard
from coindash.exceptions import UnknownCoinError
from coindash.models.market import Coin
from coindash.models.view import AddCoinRequest, DashboardView
from coindash.view.live import LiveView
from coindash.view.page import PAGE_HTML
from coindash.view.render import render_history, render_suggestion, render_view

log = logging.getLogger("api")

router = APIRouter()


def _dashboard(request: Request) -> Dashboard:
    return request.app.state.dashboard


def _coin_json(c: Coin) -> dict:
    return {"id": c.id, "name": c.name, "ticker": c.ticker}


async def _stop_task(task: asyncio.Task) -> None:
    """Cancel task and collect its outcome, including a send failure."""
    task.cancel()
    with contextlib.suppress(Exception, asyncio.CancelledError):
        await task


@router.get("/", response_class=HTMLResponse)
async def index():
    return PAGE_HTML


@router.get("/view", response_model=DashboardView)
async def view(request: Request):
    """Current rendered view (same payload the /ws stream pushes)."""
    return render_view(_dashboard(request))


@router.get("/coins")
async def list_coins(request: Request):
    dashboard = _dashboard(request)
    return {
        "coins": [_coin_json(c) for c in dashboard.coins],
        "active": dashboard.active_id,
    }


@router.post("/coins")
async def add_coin(request: Request, body: AddCoinRequest):
    """
    Track a coin picked from the suggestion list.
    Adding an already-tracked id only makes it active.
    """
    dashboard = _dashboard(request)
    before = len(dashboard.coins)
    coin = dashboard.add(Coin(id=body.id, name=body.name, ticker=body.ticker.upper()))
    return {
        "ok": True,
        "added": len(dashboard.coins) > before,
        "active": dashboard.active_id,
        "coin": _coin_json(coin),
    }


@router.post("/coins/{coin_id}/select")
async def select_coin(request: Request, coin_id: str):
    dashboard = _dashboard(request)
    dashboard.select(coin_id)
    return {"ok": True, "active": dashboard.active_id}


@router.post("/search")
async def search(
    request: Request,
    query: str = Query("", description="Free-text coin search"),
    wait: bool = Query(False, description="Block until this query's results are in"),
):
    """
    Set the search box text.

    Empty query clears suggestions right away. Otherwise results arrive in the
    background (pushed over /ws); pass wait=true to get them in this response.
    """
    dashboard = _dashboard(request)
    task = dashboard.search.set_query(query)
    if wait and task is not None:
        await task

    return {
        "query": dashboard.search.query,
        "suggestions": [render_suggestion(s) for s in dashboard.search.suggestions],
    }


@router.get("/series/{coin_id}")
async def series(request: Request, coin_id: str):
    dashboard = _dashboard(request)
    if dashboard.find(coin_id) is None:
        raise UnknownCoinError(coin_id)

    entry = dashboard.series.get(coin_id)
    return {
        "coin": coin_id,
        "labels": entry.labels if entry else [],
        "values": entry.values if entry else [],
        "error": entry.error if entry else False,
    }


@router.get("/history/{coin_id}")
async def history(request: Request, coin_id: str):
    dashboard = _dashboard(request)
    if dashboard.find(coin_id) is None:
        raise UnknownCoinError(coin_id)
    return {"coin": coin_id, "history": render_history(dashboard.history.get(coin_id))}


@router.websocket("/ws")
async def view_stream(websocket: WebSocket):
    """
    Pushes the rendered view on connect and after every state change.
    """
    live: LiveView = websocket.app.state.live_view
    await websocket.accept()
    q = live.connect()

    async def _push() -> None:
        while True:
            current = await q.get()
            await websocket.send_json(current.model_dump())

    pusher = asyncio.create_task(_push())
    try:
        # Incoming frames are ignored; receiving only detects the disconnect.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        log.debug("View stream client disconnected")
    finally:
        live.disconnect(q)
        await _stop_task(pusher)
