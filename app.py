# Thin entrypoint exposing Dash `app` and Flask `server`
from survey_dashboard import app, server  # noqa: F401
from survey_dashboard import config


if __name__ == "__main__":  # pragma: no cover
    # For production: use gunicorn, e.g.:
    # gunicorn app:server -c gunicorn.conf.py
    app.run(host="0.0.0.0", port=config.PORT, debug=config.DEBUG)
