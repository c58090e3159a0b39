"""Declarative seed data: what gets provisioned, kept apart from how.

The catalog is a JSON document (see ``data/seed_data.json``). Loading it
validates shapes and enum values only; references between entries (a product's
category, a chef's section, a grant's categories) are resolved later, while
provisioning, so a typo drops one row instead of aborting the whole run.
"""
import json
from decimal import Decimal, InvalidOperation

from adisyon.models import KitchenEnum, RoleEnum
from adisyon.utils import parse_enum


PRICE_QUANTUM = Decimal("0.01")


class SeedDataError(ValueError):
    pass


def _require(entry, key, where):
    value = entry.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        raise SeedDataError(f"{where}: {key} is required")
    return value.strip() if isinstance(value, str) else value


def _positive_int(value, field_name, where):
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise SeedDataError(f"{where}: {field_name} must be a positive integer")
    return value


def _optional_enum(enum_cls, raw_value, field_name, where):
    if raw_value is None:
        return None
    try:
        return parse_enum(enum_cls, raw_value, field_name)
    except ValueError as exc:
        raise SeedDataError(f"{where}: {exc}") from exc


def _entries(data, key):
    entries = data.get(key, [])
    if not isinstance(entries, list):
        raise SeedDataError(f"{key} must be a list")
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise SeedDataError(f"{key}[{index}] must be an object")
    return entries


def _check_unique(items, key, kind):
    seen = set()
    for item in items:
        if item[key] in seen:
            raise SeedDataError(f"duplicate {kind} {item[key]!r}")
        seen.add(item[key])


def parse_price(raw_value, where="price"):
    if isinstance(raw_value, bool) or raw_value is None:
        raise SeedDataError(f"{where}: price is required")
    try:
        price = Decimal(str(raw_value))
    except InvalidOperation as exc:
        raise SeedDataError(f"{where}: invalid price {raw_value!r}") from exc
    if not price.is_finite() or price < 0:
        raise SeedDataError(f"{where}: invalid price {raw_value!r}")
    return price.quantize(PRICE_QUANTUM)


def parse_capacity_rules(raw_rules, where):
    """Normalize a capacity declaration into ``[(up_to, capacity), ...]``.

    A bare integer means a flat capacity. Otherwise the rules are steps in
    ascending ``up_to`` order, and the last one must omit ``up_to`` so every
    table number is covered.
    """
    if isinstance(raw_rules, int) and not isinstance(raw_rules, bool):
        return [(None, _positive_int(raw_rules, "capacity", where))]
    if not isinstance(raw_rules, list) or not raw_rules:
        raise SeedDataError(f"{where}: capacity must be an integer or a non-empty list of steps")

    rules = []
    previous = 0
    for index, step in enumerate(raw_rules):
        if not isinstance(step, dict):
            raise SeedDataError(f"{where}: capacity step {index} must be an object")
        capacity = _positive_int(step.get("capacity"), "capacity", where)
        up_to = step.get("up_to")
        is_last = index == len(raw_rules) - 1
        if up_to is None:
            if not is_last:
                raise SeedDataError(f"{where}: only the last capacity step may omit up_to")
        else:
            up_to = _positive_int(up_to, "up_to", where)
            if up_to <= previous:
                raise SeedDataError(f"{where}: capacity steps must have increasing up_to")
            if is_last:
                raise SeedDataError(f"{where}: the last capacity step must omit up_to")
            previous = up_to
        rules.append((up_to, capacity))
    return rules


def table_capacity(rules, number):
    for up_to, capacity in rules:
        if up_to is None or number <= up_to:
            return capacity
    raise SeedDataError(f"no capacity step covers table {number}")


def _parse_section(entry, index):
    where = f"sections[{index}]"
    tables = entry.get("tables") or {}
    if not isinstance(tables, dict):
        raise SeedDataError(f"{where}: tables must be an object")
    return {
        "name": _require(entry, "name", where),
        "description": (entry.get("description") or "").strip() or None,
        "table_count": _positive_int(tables.get("count"), "tables.count", where),
        "capacity_rules": parse_capacity_rules(tables.get("capacity"), where),
    }


def _parse_user(entry, index):
    where = f"users[{index}]"
    section = entry.get("section")
    password = entry.get("password")
    if password is not None and not isinstance(password, str):
        raise SeedDataError(f"{where}: password must be a string")
    return {
        "username": _require(entry, "username", where),
        "full_name": _require(entry, "full_name", where),
        "role": _optional_enum(RoleEnum, _require(entry, "role", where), "role", where),
        "section": section.strip() if isinstance(section, str) and section.strip() else None,
        "password": password,
    }


def _parse_category(entry, index):
    where = f"categories[{index}]"
    return {
        "name": _require(entry, "name", where),
        "kitchen": _optional_enum(KitchenEnum, entry.get("kitchen"), "kitchen", where),
    }


def _parse_product(entry, index):
    where = f"products[{index}]"
    return {
        "name": _require(entry, "name", where),
        "price": parse_price(entry.get("price"), where),
        "category": _require(entry, "category", where),
        "kitchen": _optional_enum(KitchenEnum, entry.get("kitchen"), "kitchen", where),
    }


def _parse_grant(entry, index):
    where = f"chef_permissions[{index}]"
    categories = entry.get("categories")
    if not isinstance(categories, list) or not all(isinstance(c, str) and c.strip() for c in categories):
        raise SeedDataError(f"{where}: categories must be a list of names")
    names = []
    for name in categories:
        if name.strip() not in names:
            names.append(name.strip())
    return {"username": _require(entry, "username", where), "categories": names}


def parse_catalog(data):
    if not isinstance(data, dict):
        raise SeedDataError("seed data must be a JSON object")

    catalog = {
        "sections": [_parse_section(e, i) for i, e in enumerate(_entries(data, "sections"))],
        "users": [_parse_user(e, i) for i, e in enumerate(_entries(data, "users"))],
        "categories": [_parse_category(e, i) for i, e in enumerate(_entries(data, "categories"))],
        "products": [_parse_product(e, i) for i, e in enumerate(_entries(data, "products"))],
        "chef_permissions": [_parse_grant(e, i) for i, e in enumerate(_entries(data, "chef_permissions"))],
    }

    _check_unique(catalog["sections"], "name", "section")
    _check_unique(catalog["users"], "username", "user")
    _check_unique(catalog["categories"], "name", "category")
    _check_unique(catalog["products"], "name", "product")
    _check_unique(catalog["chef_permissions"], "username", "chef permission entry")
    return catalog


def load_catalog(path):
    try:
        with open(path, encoding="utf-8") as fh:
            data = json.load(fh)
    except OSError as exc:
        raise SeedDataError(f"cannot read seed data {path}: {exc}") from exc
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise SeedDataError(f"invalid JSON in {path}: {exc}") from exc
    return parse_catalog(data)
