#!/usr/bin/env python
"""
Server Entry Point

Usage:
    Development:  python run_server.py --dev
    Production:   python run_server.py

    Or with Gunicorn:
    gunicorn marketplace_reports.main:app -c gunicorn.conf.py
"""

import argparse
import os
import subprocess

APP_PATH = "marketplace_reports.main:app"


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    import uvicorn

    uvicorn.run(
        APP_PATH,
        host="0.0.0.0",
        port=port,
        reload=True,
        reload_dirs=["marketplace_reports"],
        log_level="debug",
        access_log=True,
    )


def run_prod_server(port: int):
    """Run production server with Uvicorn directly."""
    import uvicorn

    uvicorn.run(
        APP_PATH,
        host="0.0.0.0",
        port=port,
        workers=int(os.getenv("WORKERS", 4)),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        access_log=True,
        proxy_headers=True,
        forwarded_allow_ips="*",
        server_header=False,
        date_header=True,
    )


def run_gunicorn():
    """Run with Gunicorn (recommended for production)."""
    subprocess.run(["gunicorn", APP_PATH, "-c", "gunicorn.conf.py"], check=True)


def main():
    parser = argparse.ArgumentParser(description="Marketplace Reports API Server")
    parser.add_argument("--dev", action="store_true", help="Run in development mode with auto-reload")
    parser.add_argument("--gunicorn", action="store_true", help="Run with Gunicorn (production)")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", 8000)), help="Port to run on (default: 8000)")

    args = parser.parse_args()

    if args.dev:
        print("Starting development server...")
        run_dev_server(args.port)
    elif args.gunicorn:
        os.environ["BIND"] = f"0.0.0.0:{args.port}"
        print("Starting production server with Gunicorn...")
        run_gunicorn()
    else:
        print("Starting production server with Uvicorn...")
        run_prod_server(args.port)


if __name__ == "__main__":
    main()
