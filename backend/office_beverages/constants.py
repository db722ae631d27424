# Overview: Closed value sets stored in string columns.

from __future__ import annotations

from enum import Enum


class ValueSet(str, Enum):
    """String enum whose members serialize as their plain value."""

    def __str__(self) -> str:
        return self.value

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class OrderStatus(ValueSet):
    PENDING = "pending"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


# Statuses that count toward the daily order limit
ACTIVE_ORDER_STATUSES = (OrderStatus.PENDING.value, OrderStatus.FULFILLED.value)


class BeverageCategory(ValueSet):
    COFFEE = "coffee"
    TEA = "tea"
    JUICE = "juice"
    SMOOTHIE = "smoothie"
    OTHER = "other"


class CaffeineLevel(ValueSet):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class CupSize(ValueSet):
    SMALL = "small"
    LARGE = "large"


class SugarQuantity(ValueSet):
    NONE = "none"
    ONE = "1"
    TWO = "2"
    THREE = "3"


class TransactionType(ValueSet):
    STOCK_IN = "stock_in"
    STOCK_OUT = "stock_out"
    ORDER_DEDUCTION = "order_deduction"
    ADJUSTMENT = "adjustment"


class StockStatus(ValueSet):
    IN_STOCK = "in"
    LOW_STOCK = "low"
    OUT_OF_STOCK = "out"
