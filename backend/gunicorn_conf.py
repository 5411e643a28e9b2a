# backend/gunicorn_conf.py

# Gunicorn config for the storefront gateway:
#   gunicorn -c gunicorn_conf.py storefront.main:app

import os

bind = f"{os.getenv('HOST', '0.0.0.0')}:{os.getenv('PORT', '8000')}"
workers = int(os.getenv("WORKERS", "2"))
worker_class = "uvicorn.workers.UvicornWorker"

# The catalog platform can be slow; keep workers alive past the request timeout middleware.
timeout = 60
graceful_timeout = 30

# Behind a reverse proxy like Nginx
forwarded_allow_ips = "*"

# --- Logging ---
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
