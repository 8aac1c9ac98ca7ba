import multiprocessing
import os

# Gunicorn configuration file
# Run with: gunicorn -c gunicorn_conf.py

wsgi_app = "taskboard.main:app"

bind = os.getenv("BIND", "0.0.0.0:8000")

# Standard formula: (2 x num_cores) + 1
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"

# Requests are short CRUD calls
timeout = 30
keepalive = 5

# Logging
accesslog = "-" # Log to stdout
errorlog = "-"  # Log to stderr
loglevel = os.getenv("LOG_LEVEL", "info").lower()

name = "taskboard_api"
