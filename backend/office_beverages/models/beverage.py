from __future__ import annotations

from ..constants import BeverageCategory, CaffeineLevel, StockStatus
from ..extensions import db
from office_beverages.time_utils import to_utc_z


def compute_stock_status(stock_quantity: int, min_stock_alert: int) -> str:
    """out at 0, low at or below the alert threshold, in otherwise."""
    if stock_quantity <= 0:
        return StockStatus.OUT_OF_STOCK.value
    if stock_quantity <= min_stock_alert:
        return StockStatus.LOW_STOCK.value
    return StockStatus.IN_STOCK.value


class Beverage(db.Model):
    __tablename__ = "beverages"
    __table_args__ = (
        db.CheckConstraint("stock_quantity >= 0", name="ck_beverages_stock_nonnegative"),
        db.Index("ix_beverages_category_active", "category", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    name = db.Column(db.String(120), nullable=False, index=True)
    category = db.Column(db.String(16), nullable=False, default=BeverageCategory.OTHER.value)
    description = db.Column(db.Text, nullable=True)
    image_url = db.Column(db.String(500), nullable=True)

    stock_quantity = db.Column(db.Integer, nullable=False, default=0)
    unit = db.Column(db.String(32), nullable=False, default="cup")
    min_stock_alert = db.Column(db.Integer, nullable=False, default=10)
    unit_price = db.Column(db.Float, nullable=False, default=0.0)

    caffeine_level = db.Column(db.String(16), nullable=False, default=CaffeineLevel.NONE.value)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def stock_status(self) -> str:
        return compute_stock_status(self.stock_quantity or 0, self.min_stock_alert or 0)

    def summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "image_url": self.image_url,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "image_url": self.image_url,
            "stock_quantity": self.stock_quantity,
            "unit": self.unit,
            "min_stock_alert": self.min_stock_alert,
            "unit_price": self.unit_price,
            "caffeine_level": self.caffeine_level,
            "is_active": self.is_active,
            "stock_status": self.stock_status,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
