"""
Name: «Postboard»
Language: Python (Flask)
Summary: web service for publishing images with captions; images are kept
in a local folder, post records in a relational database.
"""

import logging
import os
import sys

from flask import Flask, abort, current_app, request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException, RequestEntityTooLarge

from config import Config
from extensions import db, cors
import models  # noqa: F401 - registers the models for db.create_all()
from routes.pages import register_routes as register_page_routes
from routes.api import register_routes as register_api_routes
from utils.errors import PostboardError
from utils.upload_handler import UploadHandler

logger = logging.getLogger("postboard")


def _is_api_posts_path(path: str) -> bool:
    return path == "/api/posts" or path.startswith("/api/posts/")


def _plain_text(message: str, status: int):
    return message + "\n", status, {"Content-Type": "text/plain; charset=utf-8"}


def create_app(config_object=Config) -> Flask:
    """Application factory wiring all modules together."""
    # Static files are served by routes/pages.py from PUBLIC_FOLDER.
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_object)

    # Folders are resolved against the working directory, not the package.
    app.config["UPLOAD_FOLDER"] = os.path.abspath(app.config["UPLOAD_FOLDER"])
    app.config["PUBLIC_FOLDER"] = os.path.abspath(app.config["PUBLIC_FOLDER"])

    app.json.compact = False
    app.json.sort_keys = False

    @app.before_request
    def answer_preflight():
        """OPTIONS on any path gets an empty 204."""
        if request.method == "OPTIONS":
            return "", 204
        # Flask adds HEAD to GET rules; the API only speaks GET and POST.
        if request.method == "HEAD" and _is_api_posts_path(request.path):
            abort(405)
        return None

    @app.after_request
    def apply_cors_headers(response):
        """Fills the cross-origin headers Flask-Cors only sends on preflight."""
        response.headers.setdefault("Access-Control-Allow-Origin", "*")
        response.headers.setdefault("Access-Control-Allow-Methods", ",".join(app.config["CORS_METHODS"]))
        response.headers.setdefault("Access-Control-Allow-Headers", ",".join(app.config["CORS_ALLOW_HEADERS"]))
        return response

    # Extensions. Flask-Cors hooks run before apply_cors_headers.
    db.init_app(app)
    cors.init_app(
        app,
        resources={r"/*": {"origins": app.config["CORS_ORIGINS"]}},
        methods=app.config["CORS_METHODS"],
        allow_headers=app.config["CORS_ALLOW_HEADERS"],
        send_wildcard=True,
    )

    app.extensions["upload_handler"] = UploadHandler(
        app.config["UPLOAD_FOLDER"],
        allowed_extensions=app.config["ALLOWED_EXTENSIONS"],
        url_prefix=app.config["UPLOAD_URL_PREFIX"],
    )

    @app.errorhandler(PostboardError)
    def handle_postboard_error(error: PostboardError):
        if error.status_code >= 500:
            current_app.logger.error("%s %s failed: %s", request.method, request.path, error.message)
        return _plain_text(error.message, error.status_code)

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        if error.code is None or error.code < 400:
            return error
        if isinstance(error, RequestEntityTooLarge):
            return _plain_text(f"Invalid multipart form: {error.description}", 400)
        if error.code == 405:
            return _plain_text("Method not allowed", 405)
        return _plain_text(f"{error.code} {error.name}", error.code)

    # The uploads folder must exist before the first request.
    os.makedirs(app.config["UPLOAD_FOLDER"], mode=0o755, exist_ok=True)

    register_page_routes(app)
    register_api_routes(app)

    with app.app_context():
        # Connectivity check, then create missing tables.
        db.session.execute(text("SELECT 1"))
        db.create_all()
        db.session.remove()

    return app


def main():
    logging.basicConfig(
        level=Config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        app = create_app()
    except (OSError, SQLAlchemyError) as exc:
        logger.critical("Startup failed: %s", exc)
        sys.exit(1)

    logger.info("Server running on http://localhost:%s", app.config["PORT"])
    app.run(host=app.config["HOST"], port=app.config["PORT"], threaded=True)


if __name__ == "__main__":
    main()
