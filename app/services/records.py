"""Typed results returned by the catalog, engagement and feed services.

Nullable columns stay ``None`` here; an empty string stored in the database
comes back as ``""``. ``to_dict`` renders ids as strings, money as floats and
timestamps as ISO 8601.
"""
import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional


def _jsonable(value):
    if isinstance(value, Record):
        return value.to_dict()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    return value


class Record:
    def to_dict(self):
        return {
            f.name: _jsonable(getattr(self, f.name))
            for f in dataclasses.fields(self)
        }


@dataclass
class TypeView(Record):
    id: uuid.UUID
    name: str
    name_ar: Optional[str]
    description: Optional[str]
    is_active: bool

    @classmethod
    def from_model(cls, row):
        return cls(
            id=row.id,
            name=row.name,
            name_ar=row.name_ar,
            description=row.description,
            is_active=row.is_active,
        )


@dataclass
class CollectionView(Record):
    id: uuid.UUID
    type_id: uuid.UUID
    type_name: Optional[str]
    name: str
    name_ar: Optional[str]
    description: Optional[str]
    is_active: bool
    sort_order: int
    created_at: Optional[datetime]
    updated_at: Optional[datetime]

    @classmethod
    def from_model(cls, row):
        return cls(
            id=row.id,
            type_id=row.type_id,
            type_name=row.type.name if row.type else None,
            name=row.name,
            name_ar=row.name_ar,
            description=row.description,
            is_active=row.is_active,
            sort_order=row.sort_order,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@dataclass
class StockView(Record):
    available: int = 0
    reserved: int = 0
    reorder_point: int = 0

    @classmethod
    def from_model(cls, record):
        """A color without a stock record reads as all-zero."""
        if record is None:
            return cls()
        return cls(
            available=record.available or 0,
            reserved=record.reserved or 0,
            reorder_point=record.reorder_point or 0,
        )


@dataclass
class ImageView(Record):
    id: uuid.UUID
    url: str
    alt: Optional[str]
    position: int

    @classmethod
    def from_model(cls, row):
        return cls(id=row.id, url=row.url, alt=row.alt, position=row.position)


@dataclass
class VariantView(Record):
    id: uuid.UUID
    collection_id: uuid.UUID
    collection_name: Optional[str]
    name: str
    name_ar: Optional[str]
    color_code: Optional[str]
    price: Decimal
    discount: Optional[Decimal]
    ean: Optional[str]
    is_active: bool
    sort_order: int
    stock: StockView
    images: List[ImageView] = field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, row, with_images=True):
        return cls(
            id=row.id,
            collection_id=row.collection_id,
            collection_name=row.collection.name if row.collection else None,
            name=row.name,
            name_ar=row.name_ar,
            color_code=row.color_code,
            price=row.price,
            discount=row.discount,
            ean=row.ean,
            is_active=row.is_active,
            sort_order=row.sort_order,
            stock=StockView.from_model(row.stock),
            images=[ImageView.from_model(i) for i in row.images] if with_images else [],
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


@dataclass
class CreatedVariant(Record):
    id: uuid.UUID
    name: str
    ean: str


@dataclass
class ProvisionResult(Record):
    collection_id: uuid.UUID
    variants: List[CreatedVariant]


@dataclass
class VideoView(Record):
    id: uuid.UUID
    collection_id: uuid.UUID
    title: str
    video_url: str
    thumbnail_url: Optional[str]


@dataclass
class LikeToggle(Record):
    liked: bool
    like_count: int


@dataclass
class ReactionToggle(Record):
    active: bool
    symbol: str
    counts: Dict[str, int]


@dataclass
class Engagement(Record):
    like_count: int = 0
    counts: Dict[str, int] = field(default_factory=dict)
    viewer_liked: bool = False
    viewer_symbols: List[str] = field(default_factory=list)


@dataclass
class FeedVariant(Record):
    id: uuid.UUID
    name: str
    name_ar: Optional[str]
    color_code: Optional[str]
    price: Decimal
    discount: Optional[Decimal]
    image_url: Optional[str]


@dataclass
class FeedItem(Record):
    id: uuid.UUID
    collection_id: uuid.UUID
    collection_name: str
    title: str
    description: Optional[str]
    video_url: str
    thumbnail_url: Optional[str]
    duration: Optional[int]
    created_at: Optional[datetime]
    variants: List[FeedVariant]
    engagement: Engagement
