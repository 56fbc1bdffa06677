import logging
import math
import uuid
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from app import extensions
from app.extensions import db
from app.errors import (
    ConflictError,
    DependencyError,
    NotFoundError,
    TransactionError,
    ValidationError,
)
from app.models.audit_log import AuditLog
from app.models.catalog import Collection, MelhafType
from app.models.variant import ColorImage, ColorVariant, StockRecord
from app.models.video import Video
from app.services import media_service, storage_service
from app.services.ean import generate_ean, is_valid_ean
from app.services.provisioning import ProvisioningPlan, SideWrite
from app.services.records import (
    CollectionView,
    CreatedVariant,
    ImageView,
    ProvisionResult,
    StockView,
    TypeView,
    VariantView,
    VideoView,
)

logger = logging.getLogger(__name__)

STOCK_FIELDS = ("available", "reserved", "reorder_point")

# db.Integer columns are 32-bit; Numeric(12, 2) holds ten integer digits
INT_MIN, INT_MAX = -(2 ** 31), 2 ** 31 - 1
PRICE_LIMIT = Decimal(10) ** 10
CENTS = Decimal("0.01")


def parse_id(value, field="id"):
    """Coerce an identifier to UUID, or raise ValidationError."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}", field=field)


def _require_text(value, field):
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required", field=field)
    return value.strip()


def _optional_text(value, field):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", field=field)
    return value


def _parse_int(value, field, default=0):
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be an integer", field=field)
    if not INT_MIN <= value <= INT_MAX:
        raise ValidationError(f"{field} is out of range", field=field)
    return value


def _parse_bool(value, field, default=True):
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValidationError(f"{field} must be a boolean", field=field)
    return value


def _parse_decimal(value, field):
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ValidationError(f"{field} must be a number", field=field)
    if isinstance(value, float) and not math.isfinite(value):
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        number = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number", field=field)
    if not number.is_finite():
        raise ValidationError(f"{field} must be a number", field=field)
    return number


def _to_cents(number, field):
    try:
        return number.quantize(CENTS)
    except InvalidOperation:
        raise ValidationError(f"{field} is out of range", field=field)


def _parse_price(value, field="price"):
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    price = _parse_decimal(value, field)
    if price <= 0:
        raise ValidationError(f"{field} must be positive", field=field)
    price = _to_cents(price, field)
    if price == 0:
        raise ValidationError(f"{field} must be positive", field=field)
    if price >= PRICE_LIMIT:
        raise ValidationError(f"{field} is out of range", field=field)
    return price


def _parse_discount(value):
    if value is None:
        return None
    discount = _parse_decimal(value, "discount")
    if not Decimal(0) <= discount <= Decimal(100):
        raise ValidationError("discount must be a percentage", field="discount")
    return _to_cents(discount, "discount")


def _parse_stock(block):
    """Stock block of a new color. Absent means all-zero."""
    if block is None:
        return {name: 0 for name in STOCK_FIELDS}
    if not isinstance(block, dict):
        raise ValidationError("inventory must be an object", field="inventory")
    return {name: _parse_int(block.get(name), name) for name in STOCK_FIELDS}


def _variant_fields(data, index=None):
    if not isinstance(data, dict):
        raise ValidationError("Each color must be an object", index=index)
    try:
        return {
            "name": _require_text(data.get("name"), "name"),
            "name_ar": _optional_text(data.get("name_ar"), "name_ar"),
            "color_code": _optional_text(data.get("color_code"), "color_code"),
            "price": _parse_price(data.get("price")),
            "discount": _parse_discount(data.get("discount")),
            "is_active": _parse_bool(data.get("is_active"), "is_active"),
            "sort_order": _parse_int(data.get("sort_order"), "sort_order"),
            "stock": _parse_stock(data.get("inventory")),
        }
    except ValidationError as e:
        if index is not None:
            e.detail["index"] = index
        raise


def _audit(admin_id, action, entity_id, payload=None):
    return AuditLog(
        admin_id=admin_id or AuditLog.ANONYMOUS_ADMIN,
        action=action,
        entity_id=entity_id,
        payload=payload,
    )


def _commit(what):
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to %s", what)
        raise TransactionError(f"Failed to {what}") from e


def _insert_stock_record(variant_id, stock):
    db.session.add(StockRecord(id=uuid.uuid4(), variant_id=variant_id, **stock))


def _enqueue_stock_backfill(variant_id, stock):
    extensions.task_queue.enqueue(
        "app.workers.stock_backfill.ensure_stock_record",
        variant_id=str(variant_id),
        job_id=f"stock_backfill_{variant_id}",
        **stock,
    )


def _stock_side_write(variant_id, stock):
    return SideWrite(
        description=f"stock record for color {variant_id}",
        apply=lambda: _insert_stock_record(variant_id, stock),
        on_failure=lambda failure: _enqueue_stock_backfill(variant_id, stock),
    )


def _build_variant(collection_id, collection_name, spec):
    return ColorVariant(
        id=uuid.uuid4(),
        collection_id=collection_id,
        name=spec["name"],
        name_ar=spec["name_ar"],
        color_code=spec["color_code"],
        price=spec["price"],
        discount=spec["discount"],
        ean=generate_ean(collection_name, spec["name"]),
        is_active=spec["is_active"],
        sort_order=spec["sort_order"],
    )


def create_type(name, name_ar=None, description=None, is_active=True, admin_id=None):
    row = MelhafType(
        id=uuid.uuid4(),
        name=_require_text(name, "name"),
        name_ar=_optional_text(name_ar, "name_ar"),
        description=_optional_text(description, "description"),
        is_active=_parse_bool(is_active, "is_active"),
    )
    db.session.add(row)
    db.session.add(_audit(admin_id, "CREATE_TYPE", row.id, {"name": row.name}))
    _commit("create melhaf type")
    return TypeView.from_model(row)


def list_types():
    rows = MelhafType.query.order_by(MelhafType.name.asc()).all()
    return [TypeView.from_model(r) for r in rows]


def create_collection_with_variants(collection, variants, admin_id=None):
    """Create a collection and its colors in one atomic unit.

    Every color gets an EAN from its collection and color names. Stock
    records are written after the commit, one by one; a failure there is
    logged and queued for backfill but does not fail the call.

    Raises:
        ValidationError: bad input, nothing written
        NotFoundError: unknown type_id, nothing written
        TransactionError: a row failed, everything rolled back
    """
    if not isinstance(collection, dict):
        raise ValidationError("collection must be an object")
    type_id = parse_id(collection.get("type_id"), "type_id")
    name = _require_text(collection.get("name"), "name")
    name_ar = _optional_text(collection.get("name_ar"), "name_ar")
    description = _optional_text(collection.get("description"), "description")
    is_active = _parse_bool(collection.get("is_active"), "is_active")
    sort_order = _parse_int(collection.get("sort_order"), "sort_order")

    if not isinstance(variants, list) or not variants:
        raise ValidationError("Collection must have at least one color", field="colors")
    specs = [_variant_fields(v, index=i) for i, v in enumerate(variants)]

    if db.session.get(MelhafType, type_id) is None:
        raise NotFoundError("Melhaf type not found", type_id=str(type_id))

    plan = ProvisioningPlan()
    row = plan.add(
        Collection(
            id=uuid.uuid4(),
            type_id=type_id,
            name=name,
            name_ar=name_ar,
            description=description,
            is_active=is_active,
            sort_order=sort_order,
        ),
        "collection",
    )

    created = []
    for spec in specs:
        variant = plan.add(_build_variant(row.id, name, spec), f"color: {spec['name']}")
        plan.side(_stock_side_write(variant.id, spec["stock"]))
        created.append(CreatedVariant(id=variant.id, name=variant.name, ean=variant.ean))

    plan.add(
        _audit(
            admin_id,
            "CREATE_COLLECTION",
            row.id,
            {"name": name, "colors": [c.ean for c in created]},
        ),
        "audit log",
    )
    plan.execute()

    logger.info("Collection %s created with %d colors", row.id, len(created))
    return ProvisionResult(collection_id=row.id, variants=created)


def list_collections(type_id=None):
    query = Collection.query.options(joinedload(Collection.type))
    if type_id:
        query = query.filter(Collection.type_id == parse_id(type_id, "type_id"))
    rows = query.order_by(Collection.sort_order, Collection.name.asc()).all()
    return [CollectionView.from_model(r) for r in rows]


def _get_collection_row(collection_id):
    row = db.session.get(Collection, parse_id(collection_id, "collection_id"))
    if row is None:
        raise NotFoundError("Collection not found", collection_id=str(collection_id))
    return row


def get_collection(collection_id):
    return CollectionView.from_model(_get_collection_row(collection_id))


def update_collection(collection_id, fields, admin_id=None):
    """Partial update. Collections are deactivated, never deleted."""
    if not isinstance(fields, dict):
        raise ValidationError("Request body must be an object")
    row = _get_collection_row(collection_id)

    changes = {}
    if "type_id" in fields:
        type_id = parse_id(fields["type_id"], "type_id")
        if db.session.get(MelhafType, type_id) is None:
            raise NotFoundError("Melhaf type not found", type_id=str(type_id))
        changes["type_id"] = type_id
    if "name" in fields:
        changes["name"] = _require_text(fields["name"], "name")
    for key in ("name_ar", "description"):
        if key in fields:
            changes[key] = _optional_text(fields[key], key)
    if "is_active" in fields:
        changes["is_active"] = _parse_bool(fields["is_active"], "is_active")
    if "sort_order" in fields:
        changes["sort_order"] = _parse_int(fields["sort_order"], "sort_order")

    for key, value in changes.items():
        setattr(row, key, value)
    db.session.add(
        _audit(
            admin_id,
            "UPDATE_COLLECTION",
            row.id,
            {k: str(v) if isinstance(v, uuid.UUID) else v for k, v in changes.items()},
        )
    )
    _commit("update collection")
    return CollectionView.from_model(row)


def create_variant(collection_id, variant, admin_id=None):
    """Add one color to an existing collection.

    Same contract as create_collection_with_variants: the color row is
    atomic, its stock record is best effort.
    """
    spec = _variant_fields(variant)
    collection = _get_collection_row(collection_id)

    plan = ProvisioningPlan()
    row = plan.add(_build_variant(collection.id, collection.name, spec), "color")
    plan.side(_stock_side_write(row.id, spec["stock"]))
    plan.add(
        _audit(admin_id, "CREATE_VARIANT", row.id, {"name": row.name, "ean": row.ean}),
        "audit log",
    )
    plan.execute()

    logger.info("Color %s (%s) added to collection %s", row.id, row.ean, collection.id)
    return CreatedVariant(id=row.id, name=row.name, ean=row.ean)


def _variant_query():
    return ColorVariant.query.options(
        joinedload(ColorVariant.collection),
        joinedload(ColorVariant.stock),
        selectinload(ColorVariant.images),
    )


def list_variants(collection_id=None):
    query = _variant_query()
    if collection_id:
        query = query.filter(
            ColorVariant.collection_id == parse_id(collection_id, "collection_id")
        )
    rows = query.order_by(ColorVariant.sort_order, ColorVariant.name.asc()).all()
    return [VariantView.from_model(r) for r in rows]


def get_variant(variant_id, active_only=False):
    query = _variant_query().filter(
        ColorVariant.id == parse_id(variant_id, "variant_id")
    )
    if active_only:
        query = query.filter(ColorVariant.is_active.is_(True))
    row = query.first()
    if row is None:
        raise NotFoundError("Color not found", variant_id=str(variant_id))
    return VariantView.from_model(row)


def find_variant_by_ean(code):
    """Barcode scan lookup."""
    code = (code or "").strip() if isinstance(code, str) else code
    if not is_valid_ean(code):
        raise ValidationError("Invalid EAN format", ean=str(code))
    row = _variant_query().filter(ColorVariant.ean == code).first()
    if row is None:
        raise NotFoundError("Product not found", ean=code)
    return VariantView.from_model(row)


def update_stock(variant_id, available, reserved, reorder_point, admin_id=None):
    """Overwrite the counters of a color, creating the record if missing.

    Last writer wins. Values are not range-checked; suspicious ones are only
    logged.
    """
    vid = parse_id(variant_id, "variant_id")
    values = {
        "available": _parse_int(available, "available"),
        "reserved": _parse_int(reserved, "reserved"),
        "reorder_point": _parse_int(reorder_point, "reorder_point"),
    }
    if db.session.get(ColorVariant, vid) is None:
        raise NotFoundError("Color not found", variant_id=str(vid))

    if values["available"] < 0 or values["reserved"] < 0 or (
        values["reserved"] > values["available"]
    ):
        logger.warning("Suspicious stock for color %s: %s", vid, values)

    # One retry covers a concurrent insert of the same record
    for attempt in range(2):
        record = StockRecord.query.filter_by(variant_id=vid).first()
        if record is None:
            record = StockRecord(id=uuid.uuid4(), variant_id=vid)
            db.session.add(record)
        for key, value in values.items():
            setattr(record, key, value)
        db.session.add(_audit(admin_id, "UPDATE_STOCK", vid, values))
        try:
            db.session.commit()
            break
        except IntegrityError:
            db.session.rollback()
            if attempt:
                logger.exception("Stock update for %s kept conflicting", vid)
                raise ConflictError(
                    "Inventory changed concurrently, retry", variant_id=str(vid)
                )
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.exception("Failed to update inventory for %s", vid)
            raise TransactionError("Failed to update inventory") from e

    return StockView.from_model(record)


def find_variants_missing_stock():
    return (
        ColorVariant.query.outerjoin(StockRecord)
        .filter(StockRecord.id.is_(None))
        .order_by(ColorVariant.created_at)
        .all()
    )


def _commit_media(what, storage_keys):
    """Commit rows that point at fresh uploads; drop the uploads on failure."""
    try:
        _commit(what)
    except TransactionError:
        for key in storage_keys:
            storage_service.delete(key)
        raise


def add_variant_image(variant_id, image_bytes, position=0, alt=None, admin_id=None):
    """Upload a color image and keep its URL."""
    vid = parse_id(variant_id, "variant_id")
    position = _parse_int(position, "position")
    alt = _optional_text(alt, "alt")
    if db.session.get(ColorVariant, vid) is None:
        raise NotFoundError("Color not found", variant_id=str(vid))

    data = media_service.validate_image(image_bytes)
    key = f"colors/{vid}/{uuid.uuid4().hex}.jpg"
    url = storage_service.upload(key, data)

    row = ColorImage(
        id=uuid.uuid4(),
        variant_id=vid,
        url=url,
        alt=alt,
        position=position,
    )
    db.session.add(row)
    db.session.add(_audit(admin_id, "ADD_IMAGE", vid, {"url": url}))
    _commit_media("save image URL", [key])
    return ImageView.from_model(row)


def create_video(
    collection_id, title, video_bytes, content_type, description=None,
    thumbnail_bytes=None, duration=None, sort_order=0, is_active=True,
    admin_id=None,
):
    """Upload a collection video. The thumbnail is optional and best effort."""
    title = _require_text(title, "title")
    description = _optional_text(description, "description")
    duration = _parse_int(duration, "duration", default=None)
    sort_order = _parse_int(sort_order, "sort_order")
    is_active = _parse_bool(is_active, "is_active")
    collection = _get_collection_row(collection_id)
    ext = media_service.validate_video(video_bytes, content_type)
    thumb = None
    if thumbnail_bytes:
        thumb = media_service.create_thumbnail(media_service.validate_image(thumbnail_bytes))

    video_id = uuid.uuid4()
    keys = [f"videos/{collection.id}/{video_id.hex}.{ext}"]
    video_url = storage_service.upload(keys[0], video_bytes, content_type)
    if video_url.startswith("http://"):
        video_url = "https://" + video_url[len("http://"):]

    thumbnail_url = None
    if thumb is not None:
        try:
            thumbnail_url = storage_service.upload(
                f"videos/{collection.id}/{video_id.hex}.jpg", thumb
            )
            keys.append(f"videos/{collection.id}/{video_id.hex}.jpg")
        except DependencyError:
            logger.warning("Thumbnail upload skipped for video %s", video_id)

    row = Video(
        id=video_id,
        collection_id=collection.id,
        title=title,
        description=description,
        video_url=video_url,
        thumbnail_url=thumbnail_url,
        duration=duration,
        is_active=is_active,
        sort_order=sort_order,
    )
    db.session.add(row)
    db.session.add(_audit(admin_id, "CREATE_VIDEO", video_id, {"title": title}))
    _commit_media("save video", keys)
    return VideoView(
        id=row.id,
        collection_id=row.collection_id,
        title=row.title,
        video_url=row.video_url,
        thumbnail_url=row.thumbnail_url,
    )


def get_stats():
    """Row counts for the stats CLI command."""
    return {
        "collections": Collection.query.count(),
        "colors": ColorVariant.query.count(),
        "videos": Video.query.count(),
        "colors_without_stock": len(find_variants_missing_stock()),
    }
