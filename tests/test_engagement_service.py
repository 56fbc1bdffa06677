"""Tests for like/reaction toggles and engagement reads."""
import logging
import uuid

import pytest
from sqlalchemy.orm import Query

from app.errors import NotFoundError, ValidationError
from app.models.video import VideoLike, VideoReaction
from app.services import engagement_service


@pytest.fixture
def video_id(make_collection, make_video):
    return make_video(make_collection().collection_id)


def test_like_toggles(video_id):
    first = engagement_service.toggle_like(video_id, "u1")
    assert first.to_dict() == {"liked": True, "like_count": 1}

    second = engagement_service.toggle_like(video_id, "u1")
    assert second.to_dict() == {"liked": False, "like_count": 0}
    assert VideoLike.query.count() == 0


def test_unlike_when_edge_already_removed(video_id, monkeypatch, caplog):
    engagement_service.toggle_like(video_id, "u1")
    original_delete = Query.delete

    def removed_concurrently(self, *args, **kwargs):
        # Another toggler deletes the row first; ours then matches nothing
        original_delete(self, *args, **kwargs)
        return 0

    monkeypatch.setattr(Query, "delete", removed_concurrently)

    with caplog.at_level(logging.INFO, logger="app.services.engagement_service"):
        result = engagement_service.toggle_like(video_id, "u1")

    assert result.to_dict() == {"liked": False, "like_count": 0}
    assert "already gone" in caplog.text


def test_like_count_spans_actors(video_id):
    engagement_service.toggle_like(video_id, "u1")
    result = engagement_service.toggle_like(video_id, "u2")

    assert result.like_count == 2
    assert engagement_service.toggle_like(video_id, "u1").like_count == 1


def test_reactions_are_independent(video_id):
    engagement_service.toggle_reaction(video_id, "u1", "🔥")
    engagement_service.toggle_reaction(video_id, "u2", "🔥")
    result = engagement_service.toggle_reaction(video_id, "u1", "👍")

    assert result.active is True
    assert result.symbol == "👍"
    assert result.counts == {"🔥": 2, "👍": 1}

    removed = engagement_service.toggle_reaction(video_id, "u1", "🔥")
    assert removed.active is False
    assert removed.counts == {"🔥": 1, "👍": 1}
    assert VideoReaction.query.filter_by(actor_id="u1").count() == 1


def test_two_codepoint_emoji_is_accepted(video_id):
    result = engagement_service.toggle_reaction(video_id, "u1", "❤️")
    assert result.counts == {"❤️": 1}


@pytest.mark.parametrize("symbol", [None, "", "   ", "fire", 3])
def test_invalid_reaction(video_id, symbol):
    with pytest.raises(ValidationError):
        engagement_service.toggle_reaction(video_id, "u1", symbol)
    assert VideoReaction.query.count() == 0


def test_toggle_requires_actor(video_id):
    with pytest.raises(ValidationError):
        engagement_service.toggle_like(video_id, "")
    with pytest.raises(ValidationError):
        engagement_service.toggle_like(video_id, "x" * 65)


def test_unknown_video(app):
    with pytest.raises(NotFoundError, match="Video not found"):
        engagement_service.toggle_like(uuid.uuid4(), "u1")
    with pytest.raises(NotFoundError):
        engagement_service.get_engagement(uuid.uuid4())
    with pytest.raises(ValidationError):
        engagement_service.get_engagement("not-a-uuid")


def test_engagement_for_viewer(video_id):
    engagement_service.toggle_like(video_id, "u1")
    engagement_service.toggle_reaction(video_id, "u1", "🔥")
    engagement_service.toggle_reaction(video_id, "u2", "👍")

    mine = engagement_service.get_engagement(video_id, "u1")
    assert mine.like_count == 1
    assert mine.counts == {"🔥": 1, "👍": 1}
    assert mine.viewer_liked is True
    assert mine.viewer_symbols == ["🔥"]

    anonymous = engagement_service.get_engagement(video_id)
    assert anonymous.like_count == 1
    assert anonymous.viewer_liked is False
    assert anonymous.viewer_symbols == []


def test_engagement_many_covers_videos_without_activity(make_collection, make_video):
    collection_id = make_collection().collection_id
    busy = make_video(collection_id, "Busy")
    quiet = make_video(collection_id, "Quiet")
    engagement_service.toggle_like(busy, "u1")

    result = engagement_service.get_engagement_many([busy, quiet], "u1")

    assert set(result) == {busy, quiet}
    assert result[busy].viewer_liked is True
    assert result[quiet].to_dict() == {
        "like_count": 0,
        "counts": {},
        "viewer_liked": False,
        "viewer_symbols": [],
    }
    assert engagement_service.get_engagement_many([]) == {}
