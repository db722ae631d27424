from __future__ import annotations

from ..extensions import db
from ..permissions import Role
from office_beverages.time_utils import to_utc_z


class User(db.Model):
    """
    Office staff account: employees, office boys and admins.

    Username and email are globally unique. Accounts are never hard-disabled
    by deleting them; is_active=False blocks login and invalidates sessions.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.Index("ix_users_role_active", "role", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    username = db.Column(db.String(50), nullable=False, unique=True, index=True)
    email = db.Column(db.String(255), nullable=False, unique=True)
    full_name = db.Column(db.String(120), nullable=False)
    department = db.Column(db.String(120), nullable=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default=Role.EMPLOYEE.value)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    # Shift window, "HH:MM" 24h
    work_start_time = db.Column(db.String(5), nullable=True)
    work_end_time = db.Column(db.String(5), nullable=True)

    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def summary(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "email": self.email,
            "department": self.department,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "username": self.username,
            "full_name": self.full_name,
            "email": self.email,
            "department": self.department,
            "role": self.role,
            "is_active": self.is_active,
            "work_start_time": self.work_start_time,
            "work_end_time": self.work_end_time,
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
