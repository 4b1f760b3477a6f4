"""
Warden - FastAPI Application
==============================
Creates and configures the console web application.

Responsibilities:
    - Create the FastAPI app instance with CORS and metadata
    - Build the PanelSession (alert queue, backend client, navigator)
    - Register API routes and the WebSocket endpoint
    - Close the backend HTTP client on shutdown

Architecture:
    The browser renders pages itself and talks to this process only:
    - REST calls under /api/ (see routes.py)
    - A WebSocket at /ws that pushes "alert" and "navigate" events and
      receives "route" reports
"""

import json
import logging
import os
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from console.config import BACKEND_TOKEN, ConfigManager
from console.routes import create_router
from console.session import PanelSession
from console.websocket import WebSocketManager, alert_payload

logger = logging.getLogger(__name__)


def create_app(
    project_dir: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    scheduler=None,
) -> FastAPI:
    """
    Application factory: create and configure the FastAPI instance.

    Args:
        project_dir: Root directory of the Warden project.
                     If None, auto-detected from this file's location.
        transport:   httpx transport for backend calls (tests pass a
                     MockTransport). None uses the network.
        scheduler:   Timer source for the alert queue. None uses the
                     running event loop.

    Returns:
        Configured FastAPI application ready to run with uvicorn.
    """
    if project_dir is None:
        project_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

    # -- Initialize managers ---------------------------------------------------
    config_manager = ConfigManager(project_dir)
    config = config_manager.load()
    if "_config_error" in config:
        logger.warning("Using default configuration: %s", config["_config_error"])

    ws_manager = WebSocketManager()
    session = PanelSession(
        config,
        ws_manager,
        token=config_manager.get_secret(BACKEND_TOKEN),
        transport=transport,
        scheduler=scheduler,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Console ready, backend at %s", session.backend_url)
        yield
        await session.close()

    # -- Create FastAPI app ----------------------------------------------------
    app = FastAPI(
        title="Warden",
        description="Management console for game server instances",
        version="0.1.0",
        docs_url="/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -- Store managers on app state -------------------------------------------
    app.state.config_manager = config_manager
    app.state.ws_manager = ws_manager
    app.state.session = session

    app.include_router(create_router(session=session, config_manager=config_manager))

    # -- WebSocket endpoint ----------------------------------------------------
    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """
        Push alert/navigate events; accept route reports from the browser.
        A newly connected browser receives the visible alert right away.
        """
        await ws_manager.connect(websocket)
        try:
            await ws_manager.send(websocket, {
                "type": "alert",
                "data": alert_payload(session.queue.current),
            })
            while True:
                text = await websocket.receive_text()
                try:
                    message = json.loads(text)
                except json.JSONDecodeError:
                    logger.debug("Ignoring non-JSON WebSocket message: %r", text[:100])
                    continue
                if isinstance(message, dict) and message.get("type") == "route":
                    path = message.get("path")
                    if isinstance(path, str) and path:
                        session.navigator.report(path)
        except WebSocketDisconnect:
            ws_manager.disconnect(websocket)

    return app
