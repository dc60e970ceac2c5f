"""
Program: «Postboard» – image posts with captions.
Module: routes/pages.py – static front-end and uploaded files.
"""

from flask import send_from_directory


def register_routes(app):
    """Registers the static routes of the application."""

    @app.get("/uploads/<path:filename>")
    def uploaded_file(filename):
        """Uploaded image, served verbatim from the uploads folder."""
        return send_from_directory(app.config["UPLOAD_FOLDER"], filename)

    @app.get("/", defaults={"filename": "index.html"})
    @app.get("/<path:filename>")
    def public_file(filename):
        """Front-end asset from the public folder."""
        return send_from_directory(app.config["PUBLIC_FOLDER"], filename)
