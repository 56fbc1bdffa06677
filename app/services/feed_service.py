import logging

from flask import current_app

from app.extensions import db
from app.models.catalog import Collection
from app.models.variant import ColorImage, ColorVariant
from app.models.video import Video
from app.services import engagement_service
from app.services.catalog_service import parse_id
from app.services.records import FeedItem, FeedVariant

logger = logging.getLogger(__name__)


def clamp_limit(limit):
    """Default for missing/invalid values, silently capped at FEED_MAX_LIMIT."""
    default = current_app.config["FEED_DEFAULT_LIMIT"]
    ceiling = current_app.config["FEED_MAX_LIMIT"]
    try:
        limit = int(limit)
    except (TypeError, ValueError):
        return min(default, ceiling)
    if limit <= 0:
        return min(default, ceiling)
    return min(limit, ceiling)


def _first_image_urls(variant_ids):
    if not variant_ids:
        return {}
    rows = (
        db.session.query(ColorImage.variant_id, ColorImage.url)
        .filter(ColorImage.variant_id.in_(variant_ids))
        .order_by(ColorImage.variant_id, ColorImage.position, ColorImage.created_at)
        .all()
    )
    urls = {}
    for variant_id, url in rows:
        urls.setdefault(variant_id, url)
    return urls


def _variants_by_collection(collection_ids):
    """Active colors of each collection with their first image."""
    if not collection_ids:
        return {}
    variants = (
        ColorVariant.query.filter(
            ColorVariant.collection_id.in_(collection_ids),
            ColorVariant.is_active.is_(True),
        )
        .order_by(ColorVariant.sort_order, ColorVariant.name)
        .all()
    )
    image_urls = _first_image_urls([v.id for v in variants])

    grouped = {cid: [] for cid in collection_ids}
    for v in variants:
        grouped[v.collection_id].append(
            FeedVariant(
                id=v.id,
                name=v.name,
                name_ar=v.name_ar,
                color_code=v.color_code,
                price=v.price,
                discount=v.discount,
                image_url=image_urls.get(v.id),
            )
        )
    return grouped


def list_videos(collection_id=None, limit=None, viewer_id=None):
    """Public video feed.

    Each active video comes with its collection's active colors and the
    engagement counts (plus the viewer's own likes/reactions when a viewer
    is given). The number of queries is fixed regardless of page size.
    """
    limit = clamp_limit(limit)

    query = (
        db.session.query(Video, Collection.name)
        .join(Collection, Video.collection_id == Collection.id)
        .filter(Video.is_active.is_(True))
    )
    if collection_id:
        query = query.filter(Video.collection_id == parse_id(collection_id, "collection_id"))
    rows = query.order_by(Video.sort_order, Video.created_at.desc()).limit(limit).all()
    if not rows:
        return []

    videos = [video for video, _ in rows]
    variants = _variants_by_collection(list({v.collection_id for v in videos}))
    engagement = engagement_service.get_engagement_many(
        [v.id for v in videos], viewer_id
    )

    logger.debug("Feed assembled: %d videos (limit %d)", len(videos), limit)
    return [
        FeedItem(
            id=video.id,
            collection_id=video.collection_id,
            collection_name=collection_name,
            title=video.title,
            description=video.description,
            video_url=video.video_url,
            thumbnail_url=video.thumbnail_url,
            duration=video.duration,
            created_at=video.created_at,
            variants=variants.get(video.collection_id, []),
            engagement=engagement[video.id],
        )
        for video, collection_name in rows
    ]
