from __future__ import annotations

from ..extensions import db
from office_beverages.time_utils import to_utc_z


class InventoryTransaction(db.Model):
    """Append-only stock movement. Rows are never updated or deleted."""
    __tablename__ = "inventory_transactions"
    __table_args__ = (
        db.CheckConstraint("quantity <> 0", name="ck_invtx_quantity_nonzero"),
        db.Index("ix_invtx_beverage_created", "beverage_id", "created_at"),
        db.Index("ix_invtx_type_created", "transaction_type", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    beverage_id = db.Column(db.Integer, db.ForeignKey("beverages.id", ondelete="SET NULL"), nullable=True, index=True)
    transaction_type = db.Column(db.String(32), nullable=False, index=True)

    # Signed delta: positive adds stock, negative removes it
    quantity = db.Column(db.Integer, nullable=False)

    reason = db.Column(db.String(255), nullable=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="SET NULL"), nullable=True, index=True)
    performed_by = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    beverage = db.relationship("Beverage", backref=db.backref("transactions", lazy=True, passive_deletes=True))
    performer = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "beverage_id": self.beverage_id,
            "beverage": (
                {"id": self.beverage.id, "name": self.beverage.name, "category": self.beverage.category}
                if self.beverage else None
            ),
            "transaction_type": self.transaction_type,
            "quantity": self.quantity,
            "reason": self.reason,
            "order_id": self.order_id,
            "performed_by": self.performed_by,
            "performer": (
                {"id": self.performer.id, "full_name": self.performer.full_name}
                if self.performer else None
            ),
            "created_at": to_utc_z(self.created_at),
        }
