import io
import uuid

import pytest
from PIL import Image as PILImage

from app import create_app
from app.extensions import db as _db
from app.models.video import Video
from app.services import catalog_service


@pytest.fixture
def app():
    """Fresh application and in-memory database per test.

    Services commit, so a nested-transaction rollback would not isolate
    tests from each other.
    """
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def melhaf_type(app):
    return catalog_service.create_type(name="Voile", name_ar="فوال")


@pytest.fixture
def make_collection(melhaf_type):
    def _make(name="Azur", colors=None, **fields):
        if colors is None:
            colors = [{"name": "Sky", "price": "25.00"}]
        return catalog_service.create_collection_with_variants(
            {"type_id": str(melhaf_type.id), "name": name, **fields}, colors
        )

    return _make


@pytest.fixture
def make_video(db):
    def _make(collection_id, title="Lookbook", sort_order=0, is_active=True):
        video = Video(
            id=uuid.uuid4(),
            collection_id=collection_id,
            title=title,
            video_url=f"https://cdn.test/videos/{uuid.uuid4().hex}.mp4",
            sort_order=sort_order,
            is_active=is_active,
        )
        db.session.add(video)
        db.session.commit()
        return video.id

    return _make


@pytest.fixture
def png_bytes():
    buffer = io.BytesIO()
    PILImage.new("RGBA", (32, 24), (30, 144, 255, 255)).save(buffer, format="PNG")
    return buffer.getvalue()
