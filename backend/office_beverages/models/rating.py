from __future__ import annotations

from ..extensions import db
from office_beverages.time_utils import to_utc_z

ANONYMOUS_AUTHOR = {"id": None, "full_name": "Anonymous user", "email": None, "department": None}


class Rating(db.Model):
    __tablename__ = "ratings"
    __table_args__ = (
        db.UniqueConstraint("employee_id", "beverage_id", name="uq_ratings_employee_beverage"),
        db.CheckConstraint("rating >= 1 AND rating <= 5", name="ck_ratings_range"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    beverage_id = db.Column(db.Integer, db.ForeignKey("beverages.id", ondelete="CASCADE"), nullable=False, index=True)

    rating = db.Column(db.Integer, nullable=False)
    review = db.Column(db.String(500), nullable=True)
    is_anonymous = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    employee = db.relationship("User", backref=db.backref("ratings", lazy=True, cascade="all, delete", passive_deletes=True))
    beverage = db.relationship("Beverage", backref=db.backref("ratings", lazy=True, cascade="all, delete", passive_deletes=True))

    def to_dict(self, *, hide_author: bool = False) -> dict:
        if hide_author:
            author = dict(ANONYMOUS_AUTHOR)
        else:
            author = self.employee.summary() if self.employee else None
        return {
            "id": self.id,
            "employee_id": None if hide_author else self.employee_id,
            "employee": author,
            "beverage_id": self.beverage_id,
            "beverage": self.beverage.summary() if self.beverage else None,
            "rating": self.rating,
            "review": self.review,
            "is_anonymous": self.is_anonymous,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
