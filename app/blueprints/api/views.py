"""Public catalog and video engagement endpoints."""
from flask import request
from app.blueprints.api import api_bp
from app.blueprints.common import current_actor, json_body, ok, require_actor
from app.services import catalog_service, engagement_service, feed_service


@api_bp.route("/melhaf/videos")
def list_videos():
    """Video feed, personalized when the caller is signed in."""
    items = feed_service.list_videos(
        collection_id=request.args.get("collection_id") or None,
        limit=request.args.get("limit"),
        viewer_id=current_actor(),
    )
    return ok([item.to_dict() for item in items])


@api_bp.route("/melhaf/videos/<video_id>/interactions")
def video_interactions(video_id):
    engagement = engagement_service.get_engagement(video_id, current_actor())
    return ok(engagement.to_dict())


@api_bp.route("/melhaf/videos/<video_id>/like", methods=["POST"])
def like_video(video_id):
    result = engagement_service.toggle_like(video_id, require_actor())
    return ok(result.to_dict())


@api_bp.route("/melhaf/videos/<video_id>/react", methods=["POST"])
def react_to_video(video_id):
    actor = require_actor()
    body = json_body()
    result = engagement_service.toggle_reaction(video_id, actor, body.get("reaction"))
    return ok(result.to_dict())


@api_bp.route("/melhaf/colors/<variant_id>")
def color_details(variant_id):
    variant = catalog_service.get_variant(variant_id, active_only=True)
    return ok(variant.to_dict())


@api_bp.route("/barcode/scan", methods=["POST"])
def scan_barcode():
    variant = catalog_service.find_variant_by_ean(json_body().get("ean"))
    return ok(variant.to_dict())
