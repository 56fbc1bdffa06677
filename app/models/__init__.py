from app.models.catalog import MelhafType, Collection
from app.models.variant import ColorVariant, ColorImage, StockRecord
from app.models.video import Video, VideoLike, VideoReaction
from app.models.audit_log import AuditLog

__all__ = [
    "MelhafType",
    "Collection",
    "ColorVariant",
    "ColorImage",
    "StockRecord",
    "Video",
    "VideoLike",
    "VideoReaction",
    "AuditLog",
]
