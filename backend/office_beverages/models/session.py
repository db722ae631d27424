from __future__ import annotations

from ..extensions import db
from office_beverages.time_utils import to_utc_z


class UserSession(db.Model):
    """
    One login of one user: bearer-token record plus login/logout audit.

    Only the SHA-256 hash of the token is stored. Ending a session stamps
    logout_time and session_duration (whole minutes) and flips is_active.
    """
    __tablename__ = "user_sessions"
    __table_args__ = (
        db.Index("ix_user_sessions_user_active", "user_id", "is_active"),
        db.Index("ix_user_sessions_login_time", "login_time"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    login_time = db.Column(db.DateTime(timezone=True), nullable=False)
    logout_time = db.Column(db.DateTime(timezone=True), nullable=True)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)

    # Minutes between login and logout, set when the session ends
    session_duration = db.Column(db.Integer, nullable=True)

    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(255), nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    end_reason = db.Column(db.String(64), nullable=True)

    user = db.relationship("User", backref=db.backref("sessions", lazy=True, cascade="all, delete", passive_deletes=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "login_time": to_utc_z(self.login_time),
            "logout_time": to_utc_z(self.logout_time) if self.logout_time else None,
            "expires_at": to_utc_z(self.expires_at),
            "session_duration": self.session_duration,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "is_active": self.is_active,
            "end_reason": self.end_reason,
        }
