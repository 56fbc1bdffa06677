import uuid
from datetime import datetime, timezone
from app.extensions import db


class ColorVariant(db.Model):
    """One purchasable color of a collection."""

    __tablename__ = "melhaf_colors"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    collection_id = db.Column(
        db.Uuid,
        db.ForeignKey("melhaf_collections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    name_ar = db.Column(db.String(255))
    color_code = db.Column(db.String(32))  # hex, e.g. "#1E90FF"
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    discount = db.Column(db.Numeric(5, 2))  # percentage
    ean = db.Column(db.String(13), unique=True, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
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

    images = db.relationship(
        "ColorImage",
        backref="variant",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="ColorImage.position",
    )
    stock = db.relationship(
        "StockRecord",
        backref="variant",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def first_image_url(self):
        return self.images[0].url if self.images else None

    def __repr__(self):
        return f"<ColorVariant {self.name} [{self.ean}]>"


class ColorImage(db.Model):
    """Media reference for a color. Only the URL lives here."""

    __tablename__ = "melhaf_color_images"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    variant_id = db.Column(
        db.Uuid,
        db.ForeignKey("melhaf_colors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = db.Column(db.String(1024), nullable=False)
    alt = db.Column(db.String(255))
    position = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self):
        return f"<ColorImage #{self.position} {self.url}>"


class StockRecord(db.Model):
    __tablename__ = "melhaf_inventory"

    id = db.Column(db.Uuid, primary_key=True, default=uuid.uuid4)
    variant_id = db.Column(
        db.Uuid,
        db.ForeignKey("melhaf_colors.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    available = db.Column(db.Integer, nullable=False, default=0)
    reserved = db.Column(db.Integer, nullable=False, default=0)
    reorder_point = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def needs_reorder(self):
        return self.available <= self.reorder_point

    def __repr__(self):
        return f"<StockRecord {self.available}/{self.reserved}>"
