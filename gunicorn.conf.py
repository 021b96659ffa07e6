"""Gunicorn config for the RIP Dashboard API."""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

# Each worker holds its own snapshot and runs its own startup load.
# The registration sheet is small, so a single worker is usually enough.
worker_class = "uvicorn.workers.UvicornWorker"
workers = int(os.environ.get("WEB_CONCURRENCY", "1"))

# A cold full load fetches two sheets; RIP_FETCH_TIMEOUT bounds each one
timeout = 60
graceful_timeout = 20

# Must exceed the proxy keep-alive (60s)
keepalive = 65

wsgi_app = "ripdash.main:app"

accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info")
