"""
Warden - Console Package
==========================
The web console process that browsers talk to.

This package provides:
- FastAPI application serving the console REST API
- WebSocket endpoint pushing alert and navigation events
- The panel session owning the alert queue and the backend client
- Configuration loading from config.yaml and .env

Architecture:
    main.py      -> FastAPI app creation, middleware, WebSocket endpoint
    session.py   -> PanelSession: alert queue, backend client, navigator
    routes.py    -> All REST API endpoint handlers
    websocket.py -> WebSocket connection manager and message broadcasting
    config.py    -> Read/write config.yaml and .env files
"""
