"""
FastAPI application for the sales call relay.

Provides:
- Access token endpoint for the Twilio Voice JS SDK
- TwiML webhook endpoint that dials outbound numbers
- WebSocket endpoint for real-time objection suggestions
- Health check and status endpoints
"""

# IMPORTANT: Configure logging FIRST, before any other imports
# This ensures verbose libraries don't spam debug logs
import logging

# Reduce noise from verbose libraries - set this BEFORE they're imported
logging.getLogger("websockets").setLevel(logging.WARNING)
logging.getLogger("websockets.server").setLevel(logging.WARNING)
logging.getLogger("python_multipart").setLevel(logging.WARNING)
logging.getLogger("python_multipart.multipart").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("openai").setLevel(logging.WARNING)
logging.getLogger("openai._base_client").setLevel(logging.WARNING)
logging.getLogger("twilio").setLevel(logging.WARNING)

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, Request, WebSocket, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from fastapi.websockets import WebSocketState

from ..objections import ObjectionBridge, ObjectionSuggester
from ..storage import RelayStore
from ..telephony import CallRouter, TokenIssuer
from ..utils.config import Settings, load_settings

logger = logging.getLogger(__name__)


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def origin_allowed(origin: str, frontend_url: str) -> bool:
    """Compare a browser Origin header with the configured frontend URL."""
    return origin.rstrip("/").lower() == frontend_url.rstrip("/").lower()


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RelayStore] = None,
    suggester: Optional[ObjectionSuggester] = None,
) -> FastAPI:
    """
    Build the relay application.

    The store and the completion client are created once here and shared by
    every request and connection. Tests pass fakes for either.

    Args:
        settings: Validated settings; loaded from the environment if omitted
            (the process exits when required values are missing)
        store: Persistence adapter
        suggester: Completion client
    """
    if settings is None:
        settings = load_settings()
    configure_logging(settings.debug)

    if store is None:
        store = RelayStore(settings.database_path)
    if suggester is None:
        suggester = ObjectionSuggester(api_key=settings.openai_api_key, model=settings.openai_model)

    token_issuer = TokenIssuer.from_settings(settings)
    call_router = CallRouter(store, caller_id=settings.twilio_phone_number)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Application lifespan manager.

        Objections still in flight at shutdown are cancelled; a disconnect
        alone never cancels them.
        """
        logger.info("Starting sales call relay...")
        logger.info(f"Database: {store.db_path}")
        logger.info(f"Frontend origin: {settings.frontend_url}")
        yield
        logger.info("Shutting down sales call relay...")
        leftover = list(app.state.objection_tasks)
        for task in leftover:
            task.cancel()
        if leftover:
            await asyncio.gather(*leftover, return_exceptions=True)
            logger.info(f"Cancelled {len(leftover)} in-flight objection(s)")
        app.state.active_connections.clear()

    app = FastAPI(
        title="Sales Call Relay",
        description="Twilio calling and AI objection handling for the browser dialer",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.store = store
    app.state.suggester = suggester
    app.state.token_issuer = token_issuer
    app.state.call_router = call_router
    app.state.active_connections = {}
    app.state.objection_tasks = set()

    # =========================================================================
    # Health Check Endpoints
    # =========================================================================

    @app.get("/")
    async def root():
        """Root endpoint - basic health check."""
        return {
            "service": "Sales Call Relay",
            "status": "running",
            "active_connections": len(app.state.active_connections),
        }

    @app.get("/health")
    async def health_check():
        """Detailed health check endpoint."""
        return {
            "status": "healthy",
            "active_connections": len(app.state.active_connections),
            "config": {
                "model": suggester.model,
                "caller_id": settings.twilio_phone_number,
                "frontend_url": settings.frontend_url,
            },
        }

    # =========================================================================
    # Twilio Endpoints
    # =========================================================================

    @app.get("/token")
    async def issue_token():
        """Access token for the browser calling client."""
        return token_issuer.issue_token()

    @app.post("/voice")
    async def voice(request: Request, background_tasks: BackgroundTasks):
        """
        Twilio voice webhook - returns TwiML that dials the requested number.

        The call log is written after the response is produced; a failed
        write never changes the response.
        """
        form_data = await request.form()
        to = form_data.get("To")
        call_sid = form_data.get("CallSid")

        twiml = call_router.route_call(to, call_sid)
        background_tasks.add_task(call_router.log_call, to, call_sid)

        return Response(content=twiml, media_type="text/xml")

    # =========================================================================
    # WebSocket Endpoint for Objection Suggestions
    # =========================================================================

    @app.websocket("/objections")
    async def objections(websocket: WebSocket):
        """
        Real-time objection handling.

        Accepts {"event": "objection", "data": str} frames and answers each
        with a {"event": "suggestion", "data": str} frame. Browsers must come
        from the configured frontend origin; clients that send no Origin
        header are let through.
        """
        origin = websocket.headers.get("origin")
        if origin is not None and not origin_allowed(origin, settings.frontend_url):
            logger.warning(f"Rejected objection socket from origin {origin}")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return

        await websocket.accept()

        connection_id = str(uuid.uuid4())[:8]
        bridge = ObjectionBridge(
            suggester, store, connection_id=connection_id, pending=app.state.objection_tasks
        )
        app.state.active_connections[connection_id] = bridge

        try:
            await bridge.run(websocket)
        except Exception as e:
            logger.error(f"WebSocket error ({connection_id}): {e}")
            if websocket.client_state == WebSocketState.CONNECTED:
                await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        finally:
            app.state.active_connections.pop(connection_id, None)

    return app

