"""Gunicorn configuration for the users JSON API.

The users mirror and the edit session live in process memory, so the API
must run as exactly one worker with one thread: a single logical writer.

    gunicorn -c gunicorn.conf.py
"""
import os

wsgi_app = "usermirror.flask_app:create_app()"
bind = os.environ.get("GUNICORN_BIND", "127.0.0.1:5000")
workers = 1
threads = 1
timeout = int(os.environ.get("GUNICORN_TIMEOUT", "30"))


def post_fork(server, worker):
    """
    Called just after a worker has been forked.

    Reports where the users API token will come from; the token itself is
    loaded by usermirror.config.settings when the app is created.
    """
    from pathlib import Path

    if (Path("/run/secrets") / "users_api_token").is_file():
        worker.log.info("Users API token available in /run/secrets")
    elif os.environ.get("USERS_API_TOKEN"):
        worker.log.info("Users API token available in environment")
    else:
        worker.log.warning("No users API token configured; remote mutations will be rejected")
