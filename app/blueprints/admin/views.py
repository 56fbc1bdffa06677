"""Back-office endpoints for the melhaf catalog.

Every request must carry X-Admin-Token when ADMIN_API_TOKEN is set.
X-Admin-Id, when present, is recorded in the audit log.
"""
from flask import request
from app.blueprints.admin import admin_bp
from app.blueprints.common import check_admin_token, current_admin, json_body, ok
from app.errors import ValidationError
from app.services import catalog_service


@admin_bp.before_request
def _require_admin_token():
    check_admin_token()


def _form_bool(name, default=True):
    value = request.form.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _form_int(name, default=None):
    value = request.form.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer", field=name)


def _file_bytes(name):
    upload = request.files.get(name)
    if upload is None:
        return None, None
    return upload.read(), upload.mimetype


@admin_bp.route("/types")
def list_types():
    return ok([t.to_dict() for t in catalog_service.list_types()])


@admin_bp.route("/types", methods=["POST"])
def create_type():
    body = json_body()
    created = catalog_service.create_type(
        name=body.get("name"),
        name_ar=body.get("name_ar"),
        description=body.get("description"),
        is_active=body.get("is_active", True),
        admin_id=current_admin(),
    )
    return ok(created.to_dict(), 201)


@admin_bp.route("/collections")
def list_collections():
    rows = catalog_service.list_collections(request.args.get("type_id") or None)
    return ok([c.to_dict() for c in rows])


@admin_bp.route("/collections", methods=["POST"])
def create_collection():
    """Create a collection together with its colors."""
    body = json_body()
    result = catalog_service.create_collection_with_variants(
        collection=body,
        variants=body.get("colors"),
        admin_id=current_admin(),
    )
    return ok(
        {
            "id": str(result.collection_id),
            "colors": [v.to_dict() for v in result.variants],
        },
        201,
        message=f"Collection created with {len(result.variants)} colors",
    )


@admin_bp.route("/collections/<collection_id>")
def get_collection(collection_id):
    return ok(catalog_service.get_collection(collection_id).to_dict())


@admin_bp.route("/collections/<collection_id>", methods=["PUT"])
def update_collection(collection_id):
    updated = catalog_service.update_collection(
        collection_id, json_body(), admin_id=current_admin()
    )
    return ok(updated.to_dict(), message="Collection updated successfully")


@admin_bp.route("/colors")
def list_colors():
    rows = catalog_service.list_variants(request.args.get("collection_id") or None)
    return ok([v.to_dict() for v in rows])


@admin_bp.route("/colors", methods=["POST"])
def create_color():
    """Add a color to an existing collection."""
    body = json_body()
    created = catalog_service.create_variant(
        body.get("collection_id"), body, admin_id=current_admin()
    )
    return ok(
        created.to_dict(), 201, message="Color created with auto-generated EAN code"
    )


@admin_bp.route("/colors/<variant_id>")
def get_color(variant_id):
    return ok(catalog_service.get_variant(variant_id).to_dict())


@admin_bp.route("/colors/<variant_id>/inventory", methods=["PUT"])
def update_inventory(variant_id):
    body = json_body()
    stock = catalog_service.update_stock(
        variant_id,
        available=body.get("available"),
        reserved=body.get("reserved"),
        reorder_point=body.get("reorder_point"),
        admin_id=current_admin(),
    )
    return ok(stock.to_dict())


@admin_bp.route("/colors/<variant_id>/images", methods=["POST"])
def upload_color_image(variant_id):
    data, _ = _file_bytes("image")
    if data is None:
        raise ValidationError("Image file is required", field="image")
    image = catalog_service.add_variant_image(
        variant_id,
        data,
        position=_form_int("position", 0),
        alt=request.form.get("alt") or None,
        admin_id=current_admin(),
    )
    return ok(image.to_dict(), 201)


@admin_bp.route("/videos", methods=["POST"])
def upload_video():
    video, content_type = _file_bytes("video")
    if video is None:
        raise ValidationError("Video file is required", field="video")
    thumbnail, _ = _file_bytes("thumbnail")
    created = catalog_service.create_video(
        collection_id=request.form.get("collection_id"),
        title=request.form.get("title"),
        video_bytes=video,
        content_type=content_type,
        description=request.form.get("description") or None,
        thumbnail_bytes=thumbnail,
        duration=_form_int("duration"),
        sort_order=_form_int("sort_order", 0),
        is_active=_form_bool("is_active"),
        admin_id=current_admin(),
    )
    return ok(created.to_dict(), 201)
