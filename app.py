#!/usr/bin/env python3
"""
SSP Realty - Entry Point
==========================
One-command startup for the SSP Realty backend.

Usage:
    python app.py                  # Start with config.yaml / .env settings
    python app.py --port 9000      # Start on a custom port
    python app.py --hash-password  # Print a bcrypt hash for ADMIN_PASSWORD_HASH

This script:
    1. Loads environment variables from .env
    2. Loads configuration (defaults, config.yaml, environment)
    3. Starts uvicorn with the application factory
"""

import os
import sys
import getpass
import argparse
import uvicorn
from dotenv import load_dotenv


def hash_password_prompt() -> int:
    """Prompt for a password twice and print its bcrypt hash."""
    from realty_api.auth import hash_password

    password = getpass.getpass("Admin password: ")
    if password != getpass.getpass("Repeat password: "):
        print("Passwords do not match.", file=sys.stderr)
        return 1
    try:
        print(hash_password(password))
    except ValueError as e:
        print(str(e), file=sys.stderr)
        return 1
    return 0


def main():
    """Parse arguments, load config, and start the web server."""

    # -- Parse command-line arguments ------------------------------------------
    parser = argparse.ArgumentParser(
        description="SSP Realty - Backend API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--port", type=int, default=None,
        help="Port number to listen on (overrides PORT and config.yaml)",
    )
    parser.add_argument(
        "--host", type=str, default=None,
        help="Host binding address (overrides HOST and config.yaml)",
    )
    parser.add_argument(
        "--hash-password", action="store_true",
        help="Print a bcrypt hash for ADMIN_PASSWORD_HASH and exit",
    )
    args = parser.parse_args()

    if args.hash_password:
        sys.exit(hash_password_prompt())

    # -- Resolve project directory ---------------------------------------------
    project_dir = os.path.dirname(os.path.abspath(__file__))

    # -- Load environment variables from .env ----------------------------------
    env_path = os.path.join(project_dir, ".env")
    if os.path.exists(env_path):
        load_dotenv(env_path)

    # -- Load configuration to get web server settings -------------------------
    from realty_api.config import ConfigManager
    settings = ConfigManager(project_dir).settings()

    # Command-line args override config file and environment
    host = args.host or settings.host
    port = args.port or settings.port

    print()
    print(f"  SSP Realty backend : http://{host}:{port}")
    print(f"  Record store       : {settings.store_uri.split('@')[-1]}")
    print()

    # -- Start the web server --------------------------------------------------
    uvicorn.run(
        "realty_api.main:create_app",
        factory=True,
        host=host,
        port=port,
        reload=False,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
