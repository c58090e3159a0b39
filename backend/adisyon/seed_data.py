import logging

from adisyon.models import (
    Category,
    ChefCategoryPermission,
    DiningTable,
    Product,
    RoleEnum,
    Section,
    User,
)
from adisyon.seed_catalog import table_capacity
from adisyon.services.provisioning import ensure
from adisyon.utils import enum_value


logger = logging.getLogger(__name__)

ENTITY_KINDS = ("sections", "tables", "users", "categories", "products", "chef_permissions")


class SeedSummary:
    def __init__(self):
        self.created = {kind: 0 for kind in ENTITY_KINDS}
        self.skipped = []
        self.credentials = []

    def record(self, kind, created):
        if created:
            self.created[kind] += 1

    def skip(self, kind, key, reason):
        self.skipped.append((kind, key, reason))
        logger.warning("Skipped %s %s: %s", kind, key, reason)

    def as_dict(self):
        return {
            "created": dict(self.created),
            "skipped": len(self.skipped),
            "skipped_rows": [
                {"kind": kind, "key": key, "reason": reason}
                for kind, key, reason in self.skipped
            ],
        }


def seed_sections(session, catalog, summary):
    sections = {}
    for spec in catalog["sections"]:
        section, created = ensure(
            session,
            Section,
            {"name": spec["name"]},
            {"description": spec["description"]},
        )
        summary.record("sections", created)
        sections[section.name] = section
    logger.info("Sections ready: %d", len(sections))
    return sections


def seed_tables(session, catalog, sections, summary):
    total = 0
    for spec in catalog["sections"]:
        section = sections.get(spec["name"])
        if not section:
            summary.skip("tables", spec["name"], "section not found")
            continue

        # Numbering restarts per section; identity is (section, number).
        for number in range(1, spec["table_count"] + 1):
            _, created = ensure(
                session,
                DiningTable,
                {"section_id": section.id, "number": number},
                {"capacity": table_capacity(spec["capacity_rules"], number)},
            )
            summary.record("tables", created)
            total += 1
    logger.info("Tables ready: %d", total)


def seed_users(session, catalog, sections, credentials, summary):
    users = {}
    for spec in catalog["users"]:
        section_id = None
        if spec["section"] and spec["role"] != RoleEnum.CHEF:
            summary.skip(
                "users",
                spec["username"],
                f"section affinity only applies to CHEF accounts, {spec['section']} dropped",
            )
        elif spec["section"]:
            section = sections.get(spec["section"])
            if section:
                section_id = section.id
            else:
                summary.skip(
                    "users",
                    spec["username"],
                    f"section {spec['section']} not found, section affinity dropped",
                )

        if spec["role"] == RoleEnum.CHEF and section_id is None:
            logger.warning("Chef %s has no section", spec["username"])

        # Existing accounts may be absent from credentials; their defaults are unused.
        password, password_hash = credentials.get(spec["username"], (None, None))
        user, created = ensure(
            session,
            User,
            {"username": spec["username"]},
            {
                "password_hash": password_hash,
                "full_name": spec["full_name"],
                "role": spec["role"],
                "section_id": section_id,
                "is_active": True,
            },
        )
        summary.record("users", created)
        users[user.username] = user
        summary.credentials.append(
            (
                user.username,
                enum_value(user.role),
                user.section.name if user.section else None,
                password if created else None,
            )
        )
    logger.info("Users ready: %d", len(users))
    return users


def seed_categories(session, catalog, summary):
    categories = {}
    for spec in catalog["categories"]:
        category, created = ensure(session, Category, {"name": spec["name"]})
        summary.record("categories", created)
        categories[category.name] = category
    logger.info("Categories ready: %d", len(categories))
    return categories


def seed_products(session, catalog, categories, summary):
    default_kitchens = {spec["name"]: spec["kitchen"] for spec in catalog["categories"]}
    total = 0
    for spec in catalog["products"]:
        category = categories.get(spec["category"])
        if not category:
            summary.skip("products", spec["name"], f"category {spec['category']} not found")
            continue

        kitchen = spec["kitchen"] or default_kitchens.get(spec["category"])
        if kitchen is None:
            summary.skip("products", spec["name"], "no kitchen assignment")
            continue

        _, created = ensure(
            session,
            Product,
            {"name": spec["name"]},
            {
                "price": spec["price"],
                "category_id": category.id,
                "kitchen_assignment": kitchen,
                "is_active": True,
            },
        )
        summary.record("products", created)
        total += 1
    logger.info("Products ready: %d", total)


def seed_chef_permissions(session, catalog, users, categories, summary):
    # Grants are additive: nothing seeded earlier is revoked here.
    total = 0
    for spec in catalog["chef_permissions"]:
        username = spec["username"]
        user = users.get(username)
        if not user:
            summary.skip("chef_permissions", username, "user not found")
            continue
        if user.role != RoleEnum.CHEF:
            summary.skip("chef_permissions", username, f"user role is {enum_value(user.role)}, not CHEF")
            continue

        for category_name in spec["categories"]:
            category = categories.get(category_name)
            if not category:
                summary.skip("chef_permissions", f"{username}/{category_name}", "category not found")
                continue

            _, created = ensure(
                session,
                ChefCategoryPermission,
                {"user_id": user.id, "category_id": category.id},
            )
            summary.record("chef_permissions", created)
            total += 1
    logger.info("Chef category permissions ready: %d", total)


def seed_initial_data(session, catalog, credentials):
    """Provision every catalog entry in dependency order and return a SeedSummary.

    ``credentials`` maps each username to ``(password, password_hash)``, as
    returned by ``CredentialPolicy.resolve``.
    """
    summary = SeedSummary()

    sections = seed_sections(session, catalog, summary)
    seed_tables(session, catalog, sections, summary)
    users = seed_users(session, catalog, sections, credentials, summary)
    categories = seed_categories(session, catalog, summary)
    seed_products(session, catalog, categories, summary)
    seed_chef_permissions(session, catalog, users, categories, summary)

    if summary.skipped:
        logger.warning("Seed finished with %d skipped rows", len(summary.skipped))
    return summary
