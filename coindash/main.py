import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from coindash.api.routes import router as api_router
from coindash.config import get_settings
from coindash.dashboard.controller import Dashboard
from coindash.exceptions import UnknownCoinError
from coindash.providers.loader import get_provider, get_search_provider
from coindash.view.live import LiveView

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def create_app(dashboard: Optional[Dashboard] = None) -> FastAPI:
    """
    Builds the API around one Dashboard.

    Startup arms price polling and loads the active coin's history;
    shutdown stops polling and closes the HTTP clients.
    """
    if dashboard is None:
        dashboard = Dashboard(get_provider(), get_search_provider())

    app = FastAPI(title="Coin Dashboard", version="0.1.0")
    app.state.dashboard = dashboard
    app.state.live_view = LiveView(dashboard)
    app.include_router(api_router)

    @app.exception_handler(UnknownCoinError)
    async def _unknown_coin(request: Request, exc: UnknownCoinError):
        return JSONResponse(status_code=404, content={"detail": str(exc), "coin": exc.coin_id})

    @app.on_event("startup")
    async def _startup():
        app.state.live_view.attach()
        dashboard.start()
        logging.getLogger("main").info(
            "Dashboard started coins=%s active=%s", [c.id for c in dashboard.coins], dashboard.active_id
        )

    @app.on_event("shutdown")
    async def _shutdown():
        app.state.live_view.detach()
        await dashboard.aclose(timeout_s=settings.http_timeout_seconds)

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "app_env": settings.app_env,
            "coins_tracked": len(dashboard.coins),
            "poller_running": dashboard.poller.running,
        }

    return app


app = create_app()
