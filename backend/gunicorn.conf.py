# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with GUNICORN_WORKERS
worker_class = "gthread"
threads = 8  # one request per thread
timeout = 60
graceful_timeout = 30
keepalive = 5

# Build the app per worker so each owns its blacklist sweeper thread
preload_app = False
wsgi_app = "chatbot_api.wsgi:app"

# Logs to stdout/stderr
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with LOG_LEVEL

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False
