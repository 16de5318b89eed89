"""Gunicorn runtime configuration for the HealthLink API.

Run with: gunicorn -c gunicorn.conf.py "healthlink:create_app()"

Each worker builds its own app and storage. The memory backend and fakeredis
live inside one process, so they run with a single worker; more workers
need HEALTHLINK_STORAGE=redis with USE_FAKEREDIS=0.
"""

import multiprocessing
import os

from dotenv import load_dotenv

from healthlink.config import Settings

load_dotenv()
_storage = Settings.from_env().storage

_default_workers = (multiprocessing.cpu_count() * 2) + 1 if _storage.shared_across_processes else 1
workers = int(os.getenv("GUNICORN_WORKERS", str(_default_workers)))
if workers > 1 and not _storage.shared_across_processes:
    raise RuntimeError(
        f"GUNICORN_WORKERS={workers} needs shared storage; set HEALTHLINK_STORAGE=redis and USE_FAKEREDIS=0"
    )

bind = os.getenv("GUNICORN_BIND", "0.0.0.0:5000")
threads = int(os.getenv("GUNICORN_THREADS", "4"))
worker_class = os.getenv("GUNICORN_WORKER_CLASS", "gthread")
# Long enough for a slow LLM reply (provider timeouts default to 60s).
timeout = int(os.getenv("GUNICORN_TIMEOUT", "90"))
keepalive = int(os.getenv("GUNICORN_KEEPALIVE", "5"))
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("GUNICORN_LOGLEVEL", "info")
