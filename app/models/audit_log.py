from datetime import datetime, timezone
from app.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    admin_id = db.Column(db.String(64), nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)
    entity_id = db.Column(db.Uuid, nullable=True, index=True)
    payload = db.Column(db.JSON)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    ACTIONS = {
        "CREATE_TYPE",
        "CREATE_COLLECTION",
        "UPDATE_COLLECTION",
        "CREATE_VARIANT",
        "UPDATE_STOCK",
        "ADD_IMAGE",
        "CREATE_VIDEO",
    }

    # Admin writes that arrive without an identity header
    ANONYMOUS_ADMIN = "unknown"

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.admin_id}>"
