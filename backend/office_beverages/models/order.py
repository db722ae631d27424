from __future__ import annotations

from ..constants import CupSize, OrderStatus, SugarQuantity
from ..extensions import db
from office_beverages.time_utils import to_iso_date, to_utc_z


class Order(db.Model):
    """
    One drink ordered by one employee.

    order_date is the calendar day the order counts against for the daily
    limit. Status moves pending -> fulfilled or pending -> cancelled and never
    leaves a terminal state.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_employee_date_status", "employee_id", "order_date", "status"),
        db.Index("ix_orders_date_status", "order_date", "status"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    employee_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    beverage_id = db.Column(db.Integer, db.ForeignKey("beverages.id", ondelete="SET NULL"), nullable=True, index=True)

    order_date = db.Column(db.Date, nullable=False, index=True)

    cup_size = db.Column(db.String(8), nullable=False, default=CupSize.SMALL.value)
    sugar_quantity = db.Column(db.String(8), nullable=False, default=SugarQuantity.NONE.value)
    add_ons = db.Column(db.JSON, nullable=False, default=list)
    remarks = db.Column(db.Text, nullable=True)

    status = db.Column(db.String(16), nullable=False, default=OrderStatus.PENDING.value, index=True)

    fulfilled_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    fulfilled_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    employee = db.relationship("User", foreign_keys=[employee_id], backref=db.backref("orders", lazy=True, passive_deletes=True))
    fulfiller = db.relationship("User", foreign_keys=[fulfilled_by])
    beverage = db.relationship("Beverage", backref=db.backref("orders", lazy=True, passive_deletes=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "beverage_id": self.beverage_id,
            "employee": self.employee.summary() if self.employee else None,
            "beverage": self.beverage.summary() if self.beverage else None,
            "order_date": to_iso_date(self.order_date),
            "cup_size": self.cup_size,
            "sugar_quantity": self.sugar_quantity,
            "add_ons": list(self.add_ons or []),
            "remarks": self.remarks,
            "status": self.status,
            "fulfilled_by": self.fulfilled_by,
            "fulfiller": (
                {"id": self.fulfiller.id, "full_name": self.fulfiller.full_name}
                if self.fulfiller else None
            ),
            "fulfilled_at": to_utc_z(self.fulfilled_at) if self.fulfilled_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
