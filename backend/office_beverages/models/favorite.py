from __future__ import annotations

from ..extensions import db
from office_beverages.time_utils import to_utc_z


class Favorite(db.Model):
    __tablename__ = "favorites"
    __table_args__ = (
        db.UniqueConstraint("employee_id", "beverage_id", name="uq_favorites_employee_beverage"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    beverage_id = db.Column(db.Integer, db.ForeignKey("beverages.id", ondelete="CASCADE"), nullable=False, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    beverage = db.relationship("Beverage", backref=db.backref("favorites", lazy=True, cascade="all, delete", passive_deletes=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "beverage_id": self.beverage_id,
            "beverage": self.beverage.to_dict() if self.beverage else None,
            "created_at": to_utc_z(self.created_at),
        }
