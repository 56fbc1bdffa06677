import uuid
from datetime import datetime, timezone
from app.extensions import db


class Video(db.Model):
    """Promotional video of a collection; carries likes and reactions."""

    __tablename__ = "melhaf_videos"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    collection_id = db.Column(
        db.Uuid,
        db.ForeignKey("melhaf_collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    video_url = db.Column(db.String(1024), nullable=False)
    thumbnail_url = db.Column(db.String(1024))
    duration = db.Column(db.Integer)  # seconds
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    sort_order = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    likes = db.relationship(
        "VideoLike", backref="video", lazy="dynamic", cascade="all, delete-orphan"
    )
    reactions = db.relationship(
        "VideoReaction", backref="video", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Video {self.title}>"


class VideoLike(db.Model):
    """Existence of the row means the actor likes the video."""

    __tablename__ = "melhaf_video_likes"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    video_id = db.Column(
        db.Uuid,
        db.ForeignKey("melhaf_videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    actor_id = db.Column(db.String(64), nullable=False, index=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint("video_id", "actor_id", name="uq_video_like"),
    )

    def __repr__(self):
        return f"<VideoLike {self.actor_id} -> {self.video_id}>"


class VideoReaction(db.Model):
    __tablename__ = "melhaf_video_reactions"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    video_id = db.Column(
        db.Uuid,
        db.ForeignKey("melhaf_videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    actor_id = db.Column(db.String(64), nullable=False, index=True)
    symbol = db.Column(db.String(16), nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        db.UniqueConstraint(
            "video_id", "actor_id", "symbol", name="uq_video_reaction"
        ),
    )

    def __repr__(self):
        return f"<VideoReaction {self.symbol} by {self.actor_id}>"
