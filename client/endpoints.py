"""
Warden - Backend Endpoints
============================
Typed wrappers over the backend's /api/v1 routes.

Endpoint groups:
    /api/v1/info         - Host system information
    /api/v1/instance/*   - Game server instances (list / info / create / delete)
    /api/v1/auth/*       - Login / logout
    /api/v1/user         - The logged-in user

Lookups that only feed a page (listing, details, current user) return None
when the backend call fails, so a page renders empty instead of erroring.
Mutations propagate the ApiError to the caller.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field

from client.alerts import Notifier
from client.api import API_PREFIX, ApiClient
from client.errors import ApiError

logger = logging.getLogger(__name__)


# =============================================================================
# Models
# =============================================================================

class SystemInfo(BaseModel):
    """Host statistics. Memory figures are in KiB."""
    os: str = ""
    arch: str = ""
    hostname: str = ""
    cpus: int = 0
    cpu_clock: int = 0
    mem_total: int = 0
    mem_free: int = 0
    mem_avail: int = 0
    mem_buff: int = 0
    mem_cache: int = 0
    mem_shm: int = 0
    mem_used: int = 0
    swap_total: int = 0
    swap_free: int = 0
    load_1: float = 0.0
    load_5: float = 0.0
    load_15: float = 0.0

class InstanceConfig(BaseModel):
    """Launch configuration of an instance."""
    java: str = ""
    max_ram: int = 0
    jvm_args: list[str] = Field(default_factory=list)
    server_file: str = ""
    args: list[str] = Field(default_factory=list)
    dist_folder: list[str] = Field(default_factory=list)

class Instance(BaseModel):
    """A managed game server instance."""
    name: str
    version: str = ""
    mod_type: str = ""
    config: InstanceConfig = Field(default_factory=InstanceConfig)

class User(BaseModel):
    """The logged-in console user."""
    name: str = ""
    username: str
    permissions: str = ""


# "Vanilla", "Purpur" or {"forge": "<forge version>"}
InstanceType = str | dict[str, str]


# =============================================================================
# System
# =============================================================================

async def system_info(api: ApiClient) -> SystemInfo:
    return SystemInfo.model_validate(await api.get(f"{API_PREFIX}/info"))


# =============================================================================
# Instances
# =============================================================================

async def list_instances(api: ApiClient) -> list[str] | None:
    """Names of all instances, or None if the backend call failed."""
    try:
        return await api.get(f"{API_PREFIX}/instance/")
    except ApiError as e:
        logger.debug("Listing instances failed: %r", e)
        return None


async def get_instance(api: ApiClient, name: str) -> Instance | None:
    """Details of one instance, or None if the backend call failed."""
    try:
        data = await api.get(f"{API_PREFIX}/instance/{name}")
    except ApiError as e:
        logger.debug("Loading instance %s failed: %r", name, e)
        return None
    return Instance.model_validate(data)


async def new_instance(api: ApiClient, name: str, typ: InstanceType, version: str) -> Instance:
    """
    Create an instance.

    Args:
        name:    Instance name.
        typ:     Mod type, see InstanceType.
        version: Minecraft version, e.g. "1.19".
    """
    data = await api.post(f"{API_PREFIX}/instance/{name}", {"typ": typ, "version": version})
    return Instance.model_validate(data)


async def delete_instance(api: ApiClient, name: str) -> None:
    await api.delete(f"{API_PREFIX}/instance/{name}")


# =============================================================================
# Auth / user
# =============================================================================

async def login(api: ApiClient, username: str, password: str) -> str:
    """
    Log in and let the backend set the session cookie.

    Returns:
        A lang key: "auth.success", or the backend's failure message,
        or "auth.invalid" when the backend gave none.
    """
    envelope = await api.raw_post(
        f"{API_PREFIX}/auth/login",
        {"username": username, "password": password, "set": True},
    )
    if envelope.success:
        return "auth.success"
    return envelope.message or "auth.invalid"


async def logout(api: ApiClient, notifier: Notifier | None = None) -> None:
    await api.get(f"{API_PREFIX}/auth/logout")
    if notifier is not None:
        notifier.notify_fast("auth.logout")


async def get_user(api: ApiClient) -> User | None:
    """The logged-in user, or None if the backend call failed."""
    try:
        data: Any = await api.get(f"{API_PREFIX}/user")
    except ApiError as e:
        logger.debug("Loading user failed: %r", e)
        return None
    return User.model_validate(data)
