"""
Program: «Postboard» – image posts with captions.
Module: models/post.py – post model.

Purpose:
- ORM model Post: caption, public image path and creation time.
- Serialisation into the JSON shape returned by the API.
"""

from extensions import db


class Post(db.Model):
    """A caption with an uploaded image. Rows are never updated or deleted."""

    __tablename__ = "posts"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    image_url = db.Column(db.String(255), nullable=False)
    caption = db.Column(db.Text, nullable=False)
    # Assigned by the database clock, not by the application.
    created_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "caption": self.caption,
            "imageUrl": self.image_url,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<Post {self.id} {self.image_url}>"
