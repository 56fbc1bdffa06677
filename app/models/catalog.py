import uuid
from datetime import datetime, timezone
from app.extensions import db


class MelhafType(db.Model):
    """Parent registry for collections (PERSI, Diana, ...)."""

    __tablename__ = "melhaf_types"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    name = db.Column(db.String(255), nullable=False)
    name_ar = db.Column(db.String(255))
    description = db.Column(db.Text)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    collections = db.relationship(
        "Collection", backref="type", lazy="dynamic", cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<MelhafType {self.name}>"


class Collection(db.Model):
    __tablename__ = "melhaf_collections"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    type_id = db.Column(
        db.Uuid,
        db.ForeignKey("melhaf_types.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    name_ar = db.Column(db.String(255))
    description = db.Column(db.Text)
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

    # Relationships
    variants = db.relationship(
        "ColorVariant",
        backref="collection",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ColorVariant.sort_order",
    )
    videos = db.relationship(
        "Video", backref="collection", lazy="dynamic", cascade="all, delete-orphan"
    )

    @property
    def active_variants(self):
        return [v for v in self.variants if v.is_active]

    def __repr__(self):
        return f"<Collection {self.name}>"
