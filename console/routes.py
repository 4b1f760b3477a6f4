"""
Warden - REST API Routes
==========================
All HTTP API endpoints of the console.

Route groups:
    /api/status          - Console session snapshot
    /api/alerts/*        - Notification queue (current / push / consume)
    /api/health          - Backend liveness check
    /api/system/info     - Host information from the backend
    /api/instances/*     - Instance management (list / get / create / delete)
    /api/auth/*          - Backend login / logout
    /api/user            - Logged-in backend user
    /api/lang/*          - Localization tables
    /api/routes          - Page route table for the navigation bar
    /api/files/*         - File browser (in-memory stub)
    /api/config          - Console configuration (read / update config.yaml)
    /api/config/secrets  - Secrets in .env (masked list / set / delete)

Backend failures become HTTP errors and, except for lookups that render
empty, a "danger" alert:
    SessionExpired -> 401   ClientError   -> same status
    RemoteFailure  -> 400   Unreachable   -> 503
"""

from fastapi import APIRouter, HTTPException, Query, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from client import endpoints
from client.alerts import Severity
from client.errors import ApiError, ClientError, RemoteFailure, SessionExpired, Unreachable
from client.lang import LOCALES, pick_locale
from client.units import memory_unit_from_k
from console.config import BACKEND_TOKEN, ConfigManager
from console.session import PanelSession, alert_key
from console.websocket import alert_payload


# =============================================================================
# Request Models (Pydantic)
# =============================================================================

class AlertRequest(BaseModel):
    """Show or queue an alert."""
    message: str = Field(..., min_length=1, description="Lang key or text")
    typ: Severity = Severity.INFO
    duration: float | None = Field(None, gt=0, description="Seconds visible; config default if omitted")
    urgent: bool = Field(False, description="Pre-empt the visible alert")

class LoginRequest(BaseModel):
    """Backend credentials."""
    username: str = Field(..., min_length=1)
    password: str

class InstanceCreateRequest(BaseModel):
    """Create a game server instance."""
    typ: str | dict[str, str] = Field(..., description='"Vanilla", "Purpur" or {"forge": "<version>"}')
    version: str = Field(..., min_length=1, description="Minecraft version, e.g. 1.19")

class FileUploadRequest(BaseModel):
    """Text content to store in the file browser."""
    content: str

class WebSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    port: int | None = Field(None, gt=0, le=65535)
    host: str | None = Field(None, min_length=1)

class BackendSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    url: str | None = Field(None, min_length=1)
    ping_path: str | None = Field(None, pattern=r"^/")
    timeout: float | None = Field(None, gt=0)

class AlertSettings(BaseModel):
    """Default alert durations in seconds."""
    model_config = ConfigDict(extra="forbid")
    duration: float | None = Field(None, gt=0)
    fast_duration: float | None = Field(None, gt=0)
    urgent_duration: float | None = Field(None, gt=0)

class RouteSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    login: str | None = Field(None, pattern=r"^/")

class ConfigUpdateRequest(BaseModel):
    """
    Partial configuration update.
    Any combination of sections, and of keys within a section, can be provided.
    """
    model_config = ConfigDict(extra="forbid")
    web: WebSettings | None = None
    backend: BackendSettings | None = None
    alerts: AlertSettings | None = None
    routes: RouteSettings | None = None

class SecretRequest(BaseModel):
    """New value for a secret stored in .env."""
    value: str = Field(..., min_length=1)


# =============================================================================
# Router Factory
# =============================================================================

def create_router(session: PanelSession, config_manager: ConfigManager) -> APIRouter:
    """
    Create the API router with all endpoints.

    Args:
        session:        The console's PanelSession.
        config_manager: Reads/writes configuration files.

    Returns:
        Configured APIRouter.
    """
    router = APIRouter(prefix="/api")

    def fail(err: ApiError) -> HTTPException:
        """Alert the user about a backend failure and build the HTTP error."""
        session.report_failure(err)
        if isinstance(err, SessionExpired):
            return HTTPException(status_code=401, detail=alert_key(err))
        if isinstance(err, ClientError):
            return HTTPException(status_code=err.status, detail=alert_key(err))
        if isinstance(err, RemoteFailure):
            return HTTPException(status_code=400, detail={"message": err.message, "cause": err.cause})
        if isinstance(err, Unreachable):
            return HTTPException(status_code=503, detail=alert_key(err))
        return HTTPException(status_code=500, detail=alert_key(err))

    # =========================================================================
    # SESSION / ALERTS
    # =========================================================================

    @router.get("/status")
    async def get_status():
        return session.status

    @router.get("/alerts/current")
    async def current_alert():
        """The visible alert, or {"alert": null}."""
        return alert_payload(session.queue.current)

    @router.post("/alerts")
    async def push_alert(req: AlertRequest):
        """
        Queue an alert, or show it at once with urgent=true.
        Omitted durations use the configured defaults.
        """
        if req.urgent:
            session.notifier.urgent(req.message, req.typ, req.duration)
        else:
            session.notifier.notify(req.message, req.typ, req.duration)
        return session.queue.snapshot()

    @router.post("/alerts/consume")
    async def consume_alert():
        """Dismiss the visible alert (user clicked close)."""
        session.queue.consume()
        return session.queue.snapshot()

    @router.get("/health")
    async def health():
        """Ping the backend. A failed ping raises an urgent alert."""
        return {"alive": await session.api.ping()}

    # =========================================================================
    # SYSTEM / INSTANCES - proxied to the backend
    # =========================================================================

    @router.get("/system/info")
    async def system_info():
        """Host information plus human readable memory figures."""
        try:
            info = await endpoints.system_info(session.api)
        except ApiError as e:
            raise fail(e)

        return {
            "info": info.model_dump(),
            "memory": {
                "total": memory_unit_from_k(info.mem_total),
                "used": memory_unit_from_k(info.mem_used),
                "available": memory_unit_from_k(info.mem_avail),
                "swap_total": memory_unit_from_k(info.swap_total),
            },
        }

    @router.get("/instances")
    async def list_instances():
        names = await endpoints.list_instances(session.api)
        return {"instances": names or []}

    @router.get("/instances/{name}")
    async def get_instance(name: str):
        instance = await endpoints.get_instance(session.api, name)
        if instance is None:
            raise HTTPException(status_code=404, detail=f"Instance '{name}' not found")
        return instance.model_dump()

    @router.post("/instances/{name}")
    async def create_instance(name: str, req: InstanceCreateRequest):
        try:
            instance = await endpoints.new_instance(session.api, name, req.typ, req.version)
        except ApiError as e:
            raise fail(e)
        session.notifier.notify_fast(f"Instance '{name}' created", Severity.SUCCESS)
        return instance.model_dump()

    @router.delete("/instances/{name}")
    async def delete_instance(name: str):
        try:
            await endpoints.delete_instance(session.api, name)
        except ApiError as e:
            raise fail(e)
        session.notifier.notify_fast(f"Instance '{name}' deleted", Severity.SUCCESS)
        return {"message": f"Instance '{name}' deleted"}

    # =========================================================================
    # AUTH / USER - proxied to the backend
    # =========================================================================

    @router.post("/auth/login")
    async def login(req: LoginRequest):
        """
        Log in to the backend. The session cookie stays in the console's
        HTTP client. On success the browser is sent back to the page it
        came from (the ?next= parameter is read by the browser).
        """
        try:
            key = await endpoints.login(session.api, req.username, req.password)
        except ApiError as e:
            raise fail(e)

        if key != "auth.success":
            session.notifier.notify(key, Severity.DANGER)
            raise HTTPException(status_code=403, detail=key)

        session.notifier.notify_fast(key, Severity.SUCCESS)
        return {"message": key}

    @router.post("/auth/logout")
    async def logout():
        try:
            await endpoints.logout(session.api, session.notifier)
        except ApiError as e:
            raise fail(e)
        return {"message": "auth.logout"}

    @router.get("/user")
    async def get_user():
        user = await endpoints.get_user(session.api)
        return {"user": user.model_dump() if user else None}

    # =========================================================================
    # UI SUPPORT - lang tables and route table
    # =========================================================================

    @router.get("/lang")
    async def get_default_lang(request: Request):
        """Table for the locale picked from the Accept-Language header."""
        locale = pick_locale(request.headers.get("accept-language"))
        return {"locale": locale, "table": LOCALES[locale]}

    @router.get("/lang/{locale}")
    async def get_lang(locale: str):
        if locale not in LOCALES:
            raise HTTPException(status_code=404, detail=f"Locale '{locale}' not available")
        return {"locale": locale, "table": LOCALES[locale]}

    @router.get("/routes")
    async def get_routes():
        """Navigation entries (hidden routes excluded)."""
        return {
            "routes": [
                {"path": path, "name": info.name, "disabled": info.disabled}
                for path, info in session.routes.visible().items()
            ]
        }

    # =========================================================================
    # FILE BROWSER - in-memory stub
    # =========================================================================

    @router.get("/files")
    async def list_files(prefix: str = Query("", description="Path prefix to list")):
        entries = await session.files.list(prefix)
        return {"entries": [{"name": e.name, "is_dir": e.is_dir} for e in entries]}

    @router.get("/files/{path:path}")
    async def get_file(path: str):
        data = await session.files.get(path)
        if data is None:
            raise HTTPException(status_code=404, detail=f"File '{path}' not found")
        return Response(content=data, media_type="application/octet-stream")

    @router.put("/files/{path:path}")
    async def upload_file(path: str, req: FileUploadRequest):
        await session.files.upload(path, req.content.encode("utf-8"))
        return {"message": f"File '{path}' saved"}

    @router.delete("/files/{path:path}")
    async def delete_file(path: str):
        if not await session.files.delete(path):
            raise HTTPException(status_code=404, detail=f"File '{path}' not found")
        return {"message": f"File '{path}' deleted"}

    # =========================================================================
    # CONFIG
    # =========================================================================

    @router.get("/config")
    async def get_config():
        """Current configuration (secrets are not included)."""
        return config_manager.load()

    @router.put("/config")
    async def update_config(req: ConfigUpdateRequest):
        """
        Update configuration settings. Accepts partial updates.
        Changes are written to config.yaml and apply on next start.
        """
        updates = req.model_dump(exclude_none=True)
        if not updates:
            raise HTTPException(status_code=400, detail="No updates provided")
        try:
            return config_manager.update(updates)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    # =========================================================================
    # SECRETS - stored in .env
    # =========================================================================

    @router.get("/config/secrets")
    async def get_secrets():
        """
        Known secrets, masked for display.
        Only the first 6 and last 4 characters of each value are shown.
        """
        return config_manager.get_secrets()

    @router.put("/config/secrets/{key_name}")
    async def set_secret(key_name: str, req: SecretRequest):
        """
        Store a secret. A new backend token is used by the next backend call.
        """
        try:
            config_manager.set_secret(key_name, req.value)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if key_name == BACKEND_TOKEN:
            session.api.set_token(req.value)
        return {"message": f"Secret '{key_name}' updated", **config_manager.get_secrets()}

    @router.delete("/config/secrets/{key_name}")
    async def delete_secret(key_name: str):
        try:
            config_manager.delete_secret(key_name)
        except KeyError as e:
            raise HTTPException(status_code=404, detail=str(e))
        if key_name == BACKEND_TOKEN:
            # The process environment may still provide one
            session.api.set_token(config_manager.get_secret(BACKEND_TOKEN))
        return {"message": f"Secret '{key_name}' deleted"}

    return router
