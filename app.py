#!/usr/bin/env python3
"""
Warden - Entry Point
======================
One-command startup for the Warden management console.

Usage:
    python app.py                         # Start with default settings
    python app.py --port 9000             # Start on custom port
    python app.py --backend http://h:2500 # Use another backend
    python app.py --ping                  # Check the backend once and exit

This script:
    1. Loads environment variables from .env (backend token)
    2. Loads configuration from config.yaml
    3. Creates the FastAPI web application
    4. Starts the uvicorn server

After starting, open the printed URL in a browser to access the console.
"""

import argparse
import asyncio
import logging
import os
import sys

import uvicorn
from dotenv import load_dotenv

from client.alerts import AlertQueue, Notifier
from client.api import ApiClient
from client.lang import translate
from client.navigation import LoginRedirect, MemoryNavigator
from console.config import BACKEND_TOKEN, BACKEND_URL, DEFAULTS, ConfigManager

logger = logging.getLogger("warden")


async def check_backend(config: dict, token: str | None) -> bool:
    """Run the backend health check once, printing any alert it raises."""
    queue = AlertQueue()
    queue.subscribe(lambda alert: alert and print(f"[ALERT] {translate(alert.message)}"))

    backend = config["backend"]
    async with ApiClient(
        backend["url"],
        on_session_expired=LoginRedirect(MemoryNavigator(), config["routes"]["login"]),
        notifier=Notifier(queue),
        ping_path=backend["ping_path"],
        timeout=backend["timeout"],
        token=token,
    ) as api:
        return await api.ping()


def main():
    """Parse arguments, load config, and start the web server."""

    # -- Parse command-line arguments ------------------------------------------
    parser = argparse.ArgumentParser(
        description="Warden - Game Server Management Console",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--port", type=int, default=None,
        help="Port number for the web console (overrides config.yaml)",
    )
    parser.add_argument(
        "--host", type=str, default=None,
        help="Host binding address (overrides config.yaml)",
    )
    parser.add_argument(
        "--backend", type=str, default=None,
        help="Backend base URL (overrides config.yaml)",
    )
    parser.add_argument(
        "--ping", action="store_true",
        help="Check that the backend answers, then exit",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Verbose logging",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    project_dir = os.path.dirname(os.path.abspath(__file__))

    # -- Load environment variables from .env ----------------------------------
    env_path = os.path.join(project_dir, ".env")
    if os.path.exists(env_path):
        load_dotenv(env_path)

    if args.backend:
        os.environ[BACKEND_URL] = args.backend

    # -- Load configuration ----------------------------------------------------
    config_manager = ConfigManager(project_dir)
    config = config_manager.load()
    if "_config_error" in config:
        logger.warning("config.yaml ignored: %s", config["_config_error"])

    if args.ping:
        alive = asyncio.run(check_backend(config, config_manager.get_secret(BACKEND_TOKEN)))
        print(f"Backend {config['backend']['url']}: {'up' if alive else 'DOWN'}")
        sys.exit(0 if alive else 1)

    # Command-line args override config file
    host = args.host or config["web"].get("host", DEFAULTS["web"]["host"])
    port = args.port or config["web"].get("port", DEFAULTS["web"]["port"])

    # -- Print startup banner --------------------------------------------------
    print()
    print("  ╔══════════════════════════════════════════════╗")
    print("  ║           WARDEN v0.1                        ║")
    print("  ║   Game Server Management Console             ║")
    print("  ╚══════════════════════════════════════════════╝")
    print()
    print(f"  Console : http://{host}:{port}")
    print(f"  Backend : {config['backend']['url']}")
    print()

    # -- Start the web server --------------------------------------------------
    uvicorn.run(
        "console.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=False,
        log_level="debug" if args.debug else "info",
    )


if __name__ == "__main__":
    main()
