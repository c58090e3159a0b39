from datetime import datetime
from enum import Enum

from adisyon.extensions import db


class RoleEnum(str, Enum):
    PATRON = "PATRON"
    MANAGER = "MANAGER"
    ADMIN = "ADMIN"
    CHEF = "CHEF"
    KITCHEN1 = "KITCHEN1"
    KITCHEN2 = "KITCHEN2"
    CASHIER = "CASHIER"


class KitchenEnum(str, Enum):
    KITCHEN1 = "KITCHEN1"
    KITCHEN2 = "KITCHEN2"


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)


class Section(db.Model, TimestampMixin):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), unique=True, nullable=False)
    description = db.Column(db.String(255), nullable=True)

    tables = db.relationship("DiningTable", back_populates="section", order_by="DiningTable.number")


class DiningTable(db.Model, TimestampMixin):
    __tablename__ = "dining_table"
    __table_args__ = (
        db.UniqueConstraint("section_id", "number", name="uq_dining_table_section_number"),
        db.CheckConstraint("capacity > 0", name="ck_dining_table_capacity_positive"),
    )

    id = db.Column(db.Integer, primary_key=True)
    section_id = db.Column(db.Integer, db.ForeignKey("section.id"), nullable=False)
    number = db.Column(db.Integer, nullable=False)
    capacity = db.Column(db.Integer, nullable=False)

    section = db.relationship("Section", back_populates="tables")


class User(db.Model, TimestampMixin):
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    full_name = db.Column(db.String(120), nullable=False)
    role = db.Column(db.Enum(RoleEnum), nullable=False)
    section_id = db.Column(db.Integer, db.ForeignKey("section.id"), nullable=True)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    section = db.relationship("Section")
    category_permissions = db.relationship(
        "ChefCategoryPermission",
        back_populates="user",
        cascade="all, delete-orphan",
    )


class Category(db.Model, TimestampMixin):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)

    products = db.relationship("Product", back_populates="category")


class Product(db.Model, TimestampMixin):
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), unique=True, nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("category.id"), nullable=False)
    kitchen_assignment = db.Column(db.Enum(KitchenEnum), nullable=False)
    is_active = db.Column(db.Boolean, default=True, nullable=False)

    category = db.relationship("Category", back_populates="products")


class ChefCategoryPermission(db.Model, TimestampMixin):
    __table_args__ = (
        db.UniqueConstraint("user_id", "category_id", name="uq_chef_category_permission_user_category"),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("user.id"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("category.id"), nullable=False)

    user = db.relationship("User", back_populates="category_permissions")
    category = db.relationship("Category")
