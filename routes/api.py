"""
Program: «Postboard» – image posts with captions.
Module: routes/api.py – JSON API routes.

Purpose:
- Listing the latest posts and fetching a post by id.
- Creating a post from a multipart form (caption + image).
"""

import re

from flask import current_app, jsonify, request
from werkzeug.exceptions import RequestEntityTooLarge

from extensions import db
from models.post_repository import PostRepository
from utils.errors import InvalidInput, PayloadTooLarge, PostboardError

_ID_PATTERN = re.compile(r"^[+-]?\d+$")


def _post_repository() -> PostRepository:
    """Repository bound to the current request's session."""
    return PostRepository(
        db.session,
        timeout=current_app.config["QUERY_TIMEOUT_SECONDS"],
        max_limit=current_app.config["POSTS_LIST_LIMIT"],
    )


def _parse_post_id(raw_id: str) -> int:
    raw_id = raw_id.strip()
    if not raw_id:
        raise InvalidInput("Missing id")
    if not _ID_PATTERN.match(raw_id):
        raise InvalidInput("Invalid id")
    post_id = int(raw_id)
    if post_id <= 0:
        raise InvalidInput("Invalid id")
    return post_id


def _read_multipart_form():
    if request.mimetype != "multipart/form-data":
        raise InvalidInput("Invalid multipart form: request Content-Type isn't multipart/form-data")
    try:
        return request.form, request.files
    except RequestEntityTooLarge as exc:
        raise PayloadTooLarge(f"Invalid multipart form: {exc.description}") from exc


def register_routes(app):
    @app.get("/api/posts")
    def list_posts():
        """Latest posts, newest first."""
        posts = _post_repository().list_recent(current_app.config["POSTS_LIST_LIMIT"])
        return jsonify([post.to_dict() for post in posts])

    @app.post("/api/posts")
    def create_post():
        """Stores the uploaded image and records the post."""
        form, files = _read_multipart_form()
        uploads = current_app.extensions["upload_handler"]

        caption = uploads.read_caption(form)
        filename = uploads.accept(files)

        try:
            post = _post_repository().create(caption, uploads.public_url(filename))
        except PostboardError:
            # The record was not written, so the file would never be referenced.
            uploads.discard(filename)
            raise

        current_app.logger.info("Created post %s with %s", post.id, post.image_url)
        return jsonify(post.to_dict())

    @app.get("/api/posts/", defaults={"raw_id": ""})
    @app.get("/api/posts/<path:raw_id>")
    def get_post(raw_id: str):
        """Single post by numeric id."""
        post = _post_repository().get_by_id(_parse_post_id(raw_id))
        return jsonify(post.to_dict())
