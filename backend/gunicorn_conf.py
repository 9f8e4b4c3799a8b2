# backend/gunicorn_conf.py

# Gunicorn config file

# Basic configuration
bind = "0.0.0.0:8000"
# Conversation state is held in process memory, so exactly one worker
workers = 1
worker_class = "uvicorn.workers.UvicornWorker"
wsgi_app = "intake_bot.main:app"

# Settings for running behind a reverse proxy like Nginx
forwarded_allow_ips = "*"

# --- Logging ---
# Send access and error logs to stdout and stderr
accesslog = "-"
errorlog = "-"
# Set the log level
loglevel = "info"
