"""
Program: «Postboard» – image posts with captions.
Module: models/post_repository.py – access to post records.

Purpose:
- Creating posts and reading them back (latest first or by id).
- Bounding every database call by the configured timeout.
- Translating SQLAlchemy failures into StorageError / OperationTimeout.
"""

import logging
import time
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm.attributes import set_committed_value

from models.post import Post
from utils.errors import NotFound, OperationTimeout, StorageError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5
MAX_LIST_LIMIT = 100


class PostRepository:
    """Post storage bound to one request's session.

    The repository issues single statements only; pooling and isolation
    are left to the engine.
    """

    def __init__(self, session, timeout: float = DEFAULT_TIMEOUT_SECONDS, max_limit: int = MAX_LIST_LIMIT):
        self.session = session
        self.timeout = timeout
        self.max_limit = max_limit

    def _check_deadline(self, started: float, operation: str) -> None:
        elapsed = time.monotonic() - started
        if elapsed > self.timeout:
            raise OperationTimeout(f"{operation} timed out after {elapsed:.2f}s (limit {self.timeout}s)")

    def list_recent(self, limit: int = MAX_LIST_LIMIT) -> list[Post]:
        """Newest posts first, never more than max_limit of them."""
        if limit <= 0 or limit > self.max_limit:
            limit = self.max_limit

        started = time.monotonic()
        try:
            posts = self.session.scalars(
                select(Post).order_by(Post.id.desc()).limit(limit)
            ).all()
        except PoolTimeoutError as exc:
            raise OperationTimeout(f"DB query error: {exc}") from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"DB query error: {exc}") from exc

        self._check_deadline(started, "DB query")
        return list(posts)

    def create(self, caption: str, image_url: str) -> Post:
        """Inserts a post and returns it with the database-assigned id and time.

        created_at is re-read after the commit; if that read fails the local
        clock is used instead and the value may differ from the stored one.
        """
        post = Post(caption=caption, image_url=image_url)

        started = time.monotonic()
        try:
            self.session.add(post)
            self.session.flush()
            # Past the deadline nothing is committed.
            self._check_deadline(started, "DB insert")
            self.session.commit()
        except OperationTimeout:
            self.session.rollback()
            raise
        except PoolTimeoutError as exc:
            self.session.rollback()
            raise OperationTimeout(f"DB insert error: {exc}") from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise StorageError(f"DB insert error: {exc}") from exc

        # Detached so a rollback below cannot expire the committed values.
        self.session.expunge(post)
        try:
            created_at = self._read_created_at(post.id)
        except SQLAlchemyError as exc:
            logger.warning("Could not re-read created_at for post %s, using local time: %s", post.id, exc)
            self.session.rollback()
            created_at = datetime.now()

        set_committed_value(post, "created_at", created_at)
        return post

    def _read_created_at(self, post_id: int) -> datetime:
        return self.session.execute(
            select(Post.created_at).where(Post.id == post_id)
        ).scalar_one()

    def get_by_id(self, post_id: int) -> Post:
        started = time.monotonic()
        try:
            post = self.session.get(Post, post_id)
        except PoolTimeoutError as exc:
            raise OperationTimeout(f"DB error: {exc}") from exc
        except SQLAlchemyError as exc:
            raise StorageError(f"DB error: {exc}") from exc

        self._check_deadline(started, "DB query")
        if post is None:
            raise NotFound("Post not found")
        return post
