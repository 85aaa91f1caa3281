"""
Production Server Configuration

Run the reports API with Uvicorn workers under Gunicorn.
"""

import multiprocessing
import os

# Server socket
bind = os.getenv("BIND", "0.0.0.0:8000")
backlog = 2048

# PDF rendering is CPU-bound; keep the worker count modest
workers = int(os.getenv("WORKERS", multiprocessing.cpu_count() + 1))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
max_requests = 5000
max_requests_jitter = 500
timeout = 120
keepalive = 5
graceful_timeout = 30

# Process naming
proc_name = "marketplace-reports-api"

# Server mechanics
daemon = False
pidfile = "/tmp/marketplace-reports.pid"

# Logging
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
accesslog = "-"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'


def when_ready(server):
    """Called when server is ready to receive connections."""
    server.log.info("Marketplace reports API ready on %s", bind)
