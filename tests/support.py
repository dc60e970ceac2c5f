import io
import os

from app import create_app
from config import Config, engine_options
from extensions import db


def make_test_app(tmpdir: str):
    """Application backed by a SQLite file and folders inside tmpdir."""

    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{os.path.join(tmpdir, 'posts.db')}"
        SQLALCHEMY_ENGINE_OPTIONS = engine_options(SQLALCHEMY_DATABASE_URI, 5)
        UPLOAD_FOLDER = os.path.join(tmpdir, "uploads")
        PUBLIC_FOLDER = os.path.join(tmpdir, "public")

    os.makedirs(TestConfig.PUBLIC_FOLDER, exist_ok=True)
    return create_app(TestConfig)


def dispose(app) -> None:
    with app.app_context():
        db.session.remove()
        db.engine.dispose()


def post_form(caption="A caption", filename="photo.jpg", content=b"\xff\xd8\xff\xe0fake-jpeg"):
    data = {}
    if caption is not None:
        data["caption"] = caption
    if filename is not None:
        data["image"] = (io.BytesIO(content), filename)
    return data
