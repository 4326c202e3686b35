"""
Gunicorn configuration for deployment.
"""
import os

# Bind to the platform's PORT or default
bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Worker configuration
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'sync'
timeout = 60  # Uploads are capped at 2MB
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info')
capture_output = True

proc_name = 'optin'

preload_app = True
graceful_timeout = 30


def on_starting(server):
    print("[Gunicorn] Starting Opt-in Popups server...")


def on_exit(server):
    print("[Gunicorn] Opt-in Popups server shutting down...")
