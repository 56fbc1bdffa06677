"""Likes and emoji reactions on collection videos.

Both are edge rows keyed by (video, actor[, symbol]) under a unique
constraint. A toggle first tries to insert the edge; a unique violation
means the edge already exists, so the toggle deletes it instead. Two
concurrent togglers therefore never surface the constraint as an error.

Counts are always computed from the edge tables at read time.
"""
import logging
import uuid

from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.extensions import db
from app.errors import NotFoundError, TransactionError, ValidationError
from app.models.video import Video, VideoLike, VideoReaction
from app.services.catalog_service import parse_id
from app.services.records import Engagement, LikeToggle, ReactionToggle

logger = logging.getLogger(__name__)

ACTOR_ID_MAX_LENGTH = 64


def _require_actor(actor_id):
    if actor_id is None or not str(actor_id).strip():
        raise ValidationError("Actor identity is required", field="actor_id")
    actor_id = str(actor_id).strip()
    if len(actor_id) > ACTOR_ID_MAX_LENGTH:
        raise ValidationError("Invalid actor identity", field="actor_id")
    return actor_id


def _require_video(video_id):
    vid = parse_id(video_id, "video_id")
    if db.session.get(Video, vid) is None:
        raise NotFoundError("Video not found", video_id=str(vid))
    return vid


def _validate_symbol(symbol):
    limit = current_app.config["REACTION_MAX_CODEPOINTS"]
    if not isinstance(symbol, str) or not symbol.strip():
        raise ValidationError("Reaction emoji required", field="reaction")
    symbol = symbol.strip()
    if len(symbol) > limit:
        raise ValidationError("Invalid reaction format", field="reaction")
    return symbol


def _toggle_edge(model, **key):
    """Insert the edge, or delete it when it already exists.

    Returns:
        True when the edge exists afterwards
    """
    try:
        db.session.add(model(id=uuid.uuid4(), **key))
        db.session.commit()
        return True
    except IntegrityError:
        db.session.rollback()

    try:
        removed = model.query.filter_by(**key).delete(synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to remove %s %s", model.__tablename__, key)
        raise TransactionError("Failed to update engagement") from e

    if not removed:
        # Another toggler removed it between our insert and delete
        logger.info("Edge %s %s already gone", model.__tablename__, key)
    return False


def _like_count(video_id):
    return VideoLike.query.filter_by(video_id=video_id).count()


def _reaction_counts(video_ids):
    rows = (
        db.session.query(
            VideoReaction.video_id,
            VideoReaction.symbol,
            db.func.count(VideoReaction.id),
        )
        .filter(VideoReaction.video_id.in_(video_ids))
        .group_by(VideoReaction.video_id, VideoReaction.symbol)
        .all()
    )
    counts = {vid: {} for vid in video_ids}
    for vid, symbol, count in rows:
        counts[vid][symbol] = count
    return counts


def toggle_like(video_id, actor_id):
    actor_id = _require_actor(actor_id)
    vid = _require_video(video_id)
    liked = _toggle_edge(VideoLike, video_id=vid, actor_id=actor_id)
    return LikeToggle(liked=liked, like_count=_like_count(vid))


def toggle_reaction(video_id, actor_id, symbol):
    """Flip one reaction; other symbols of the same actor are untouched."""
    actor_id = _require_actor(actor_id)
    symbol = _validate_symbol(symbol)
    vid = _require_video(video_id)
    active = _toggle_edge(VideoReaction, video_id=vid, actor_id=actor_id, symbol=symbol)
    return ReactionToggle(active=active, symbol=symbol, counts=_reaction_counts([vid])[vid])


def get_engagement_many(video_ids, actor_id=None):
    """Engagement for several videos with a fixed number of queries.

    Args:
        video_ids: UUIDs of existing videos
        actor_id: viewer identity, None for anonymous

    Returns:
        dict of video UUID to Engagement
    """
    video_ids = list(dict.fromkeys(video_ids))
    if not video_ids:
        return {}

    like_rows = (
        db.session.query(VideoLike.video_id, db.func.count(VideoLike.id))
        .filter(VideoLike.video_id.in_(video_ids))
        .group_by(VideoLike.video_id)
        .all()
    )
    like_counts = dict(like_rows)
    reaction_counts = _reaction_counts(video_ids)

    viewer_likes = set()
    viewer_symbols = {vid: [] for vid in video_ids}
    if actor_id is not None:
        viewer_likes = {
            vid
            for (vid,) in db.session.query(VideoLike.video_id).filter(
                VideoLike.video_id.in_(video_ids), VideoLike.actor_id == str(actor_id)
            )
        }
        rows = (
            db.session.query(VideoReaction.video_id, VideoReaction.symbol)
            .filter(
                VideoReaction.video_id.in_(video_ids),
                VideoReaction.actor_id == str(actor_id),
            )
            .order_by(VideoReaction.created_at)
        )
        for vid, symbol in rows:
            viewer_symbols[vid].append(symbol)

    return {
        vid: Engagement(
            like_count=like_counts.get(vid, 0),
            counts=reaction_counts[vid],
            viewer_liked=vid in viewer_likes,
            viewer_symbols=viewer_symbols[vid],
        )
        for vid in video_ids
    }


def get_engagement(video_id, actor_id=None):
    vid = _require_video(video_id)
    return get_engagement_many([vid], actor_id)[vid]
