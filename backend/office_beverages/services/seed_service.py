# Overview: Default users and beverage catalog for a fresh database.

from __future__ import annotations

from flask import current_app

from ..constants import BeverageCategory, CaffeineLevel
from ..extensions import db
from ..models import Beverage, User
from ..permissions import Role
from . import beverage_service, user_service

DEFAULT_USERS = (
    {
        "username": "admin",
        "password": "admin123",
        "full_name": "System Administrator",
        "email": "admin@beverage-system.com",
        "role": Role.ADMIN.value,
    },
    {
        "username": "officeBoy",
        "password": "office123",
        "full_name": "Office Boy",
        "email": "office@beverage-system.com",
        "role": Role.OFFICE_BOY.value,
    },
    {
        "username": "ahmed",
        "password": "ahmed123",
        "full_name": "Ahmed Hassan",
        "email": "ahmed@company.com",
        "department": "IT",
        "role": Role.EMPLOYEE.value,
    },
    {
        "username": "sara",
        "password": "sara123",
        "full_name": "Sara Mohamed",
        "email": "sara@company.com",
        "department": "HR",
        "role": Role.EMPLOYEE.value,
    },
)


def _beverage(name, category, description, stock, unit, alert, caffeine):
    return {
        "name": name,
        "category": category.value,
        "description": description,
        "stock_quantity": stock,
        "unit": unit,
        "min_stock_alert": alert,
        "caffeine_level": caffeine.value,
    }


DEFAULT_BEVERAGES = (
    _beverage("Espresso", BeverageCategory.COFFEE, "Strong Italian coffee", 50, "cup", 10, CaffeineLevel.HIGH),
    _beverage("Cappuccino", BeverageCategory.COFFEE, "Espresso with steamed milk foam", 45, "cup", 10, CaffeineLevel.MEDIUM),
    _beverage("Latte", BeverageCategory.COFFEE, "Espresso with steamed milk", 40, "cup", 10, CaffeineLevel.MEDIUM),
    _beverage("Turkish Coffee", BeverageCategory.COFFEE, "Traditional Turkish coffee", 30, "cup", 10, CaffeineLevel.HIGH),
    _beverage("Green Tea", BeverageCategory.TEA, "Healthy green tea", 60, "bag", 15, CaffeineLevel.LOW),
    _beverage("Black Tea", BeverageCategory.TEA, "Classic black tea", 55, "bag", 15, CaffeineLevel.LOW),
    _beverage("Chamomile Tea", BeverageCategory.TEA, "Relaxing herbal tea", 35, "bag", 10, CaffeineLevel.NONE),
    _beverage("Mint Tea", BeverageCategory.TEA, "Refreshing mint tea", 40, "bag", 10, CaffeineLevel.NONE),
    _beverage("Orange Juice", BeverageCategory.JUICE, "Fresh orange juice", 25, "bottle", 8, CaffeineLevel.NONE),
    _beverage("Apple Juice", BeverageCategory.JUICE, "Fresh apple juice", 20, "bottle", 8, CaffeineLevel.NONE),
    _beverage("Mango Smoothie", BeverageCategory.SMOOTHIE, "Creamy mango smoothie", 15, "cup", 5, CaffeineLevel.NONE),
    _beverage("Berry Smoothie", BeverageCategory.SMOOTHIE, "Mixed berry smoothie", 12, "cup", 5, CaffeineLevel.NONE),
)


def seed_database() -> dict:
    """
    Create the default users and beverages on an empty database.

    Does nothing when any user exists. Returns {seeded, users, beverages}
    with the number of rows created.
    """
    if db.session.query(User).count() > 0:
        current_app.logger.info("Database already seeded, skipping")
        return {"seeded": False, "users": 0, "beverages": 0}

    users_created = 0
    for entry in DEFAULT_USERS:
        _, created = user_service.ensure_user(**entry)
        users_created += int(created)

    beverages_created = 0
    existing = {name for (name,) in db.session.query(Beverage.name).all()}
    for entry in DEFAULT_BEVERAGES:
        if entry["name"] in existing:
            continue
        beverage_service.create_beverage(dict(entry))
        beverages_created += 1

    current_app.logger.info(
        "Seeded %s users and %s beverages", users_created, beverages_created
    )
    return {"seeded": True, "users": users_created, "beverages": beverages_created}
