"""Duplicate detection run before inserting products, manufacturers and orders.

A new record is a duplicate of an existing one when every compared field
matches: text fields by fuzzy similarity at or above the threshold, numeric
fields within a small tolerance. Existing rows are scanned linearly and the
first duplicate aborts the insert with a DuplicateConflict carrying a
snapshot of the existing row.

The check reads then the caller writes, without locking, so two concurrent
requests can both pass it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from matching.fuzzy import similarity
from .. import models
from ..config import settings
from ..db import StoreError, Table

logger = logging.getLogger(__name__)


class DuplicateConflict(Exception):
    """Raised when a new record is judged a duplicate of an existing row."""

    def __init__(self, entity: str, existing: dict[str, Any]) -> None:
        super().__init__(f"Duplicate {entity} detected")
        self.entity = entity
        self.existing = existing


@dataclass(frozen=True)
class FieldRule:
    """One compared field; ``numeric`` fields use tolerance instead of fuzzy text."""
    name: str
    numeric: bool = False


ORDER_RULES = (
    FieldRule("manufacturer"),
    FieldRule("product"),
    FieldRule("product_type"),
    FieldRule("quantity", numeric=True),
    FieldRule("from_location"),
    FieldRule("to_location"),
)


def text_matches(a: str | None, b: str | None, threshold: float | None = None) -> bool:
    threshold = settings.duplicates.threshold if threshold is None else threshold
    return similarity(a, b) >= threshold


def numeric_matches(a: Any, b: Any, tolerance: float | None = None) -> bool:
    tolerance = settings.duplicates.quantity_tolerance if tolerance is None else tolerance
    try:
        return abs(float(a) - float(b)) < tolerance
    except (TypeError, ValueError):
        return False


def fields_match(
    candidate: Mapping[str, Any],
    existing: Any,
    rules: Sequence[FieldRule],
    *,
    threshold: float | None = None,
) -> bool:
    """True when every rule matches between ``candidate`` and the row ``existing``."""
    for rule in rules:
        new_value = candidate.get(rule.name)
        old_value = getattr(existing, rule.name, None)
        if rule.numeric:
            if not numeric_matches(new_value, old_value):
                return False
        elif not text_matches(new_value, old_value, threshold):
            return False
    return True


def find_duplicate_order(
    candidate: Mapping[str, Any],
    existing_orders: Iterable[models.Order],
) -> dict[str, Any] | None:
    """Snapshot of the first existing order matching on all compared fields."""
    for order in existing_orders:
        if fields_match(candidate, order, ORDER_RULES):
            return {
                "manufacturer": order.manufacturer,
                "product": order.product,
                "product_type": order.product_type,
                "quantity": order.quantity,
                "from_location": order.from_location,
                "to_location": order.to_location,
                "total_cost": order.total_cost,
                "created_at": order.created_at.isoformat() if order.created_at else None,
            }
    return None


def find_duplicate_manufacturer(
    candidate: Mapping[str, Any],
    existing_manufacturers: Iterable[models.Manufacturer],
) -> dict[str, Any] | None:
    """Same name and at least one product type offered by both."""
    offered = candidate.get("products_offered") or []

    for manufacturer in existing_manufacturers:
        if not text_matches(candidate.get("name"), manufacturer.name):
            continue

        for new_product in offered:
            for old_product in manufacturer.products_offered or []:
                if text_matches(new_product.get("product_type"), old_product.get("product_type")):
                    return {
                        "name": manufacturer.name,
                        "location": manufacturer.location,
                        "product_type": old_product.get("product_type", ""),
                        "price": old_product.get("price"),
                    }
    return None


def find_duplicate_product(
    candidate: Mapping[str, Any],
    existing_products: Iterable[models.Product],
) -> dict[str, Any] | None:
    """Same name and a shared subtype; without subtypes a near-exact name is enough."""
    new_subtypes = candidate.get("subtypes") or []
    name_only_threshold = settings.duplicates.product_name_only_threshold

    for product in existing_products:
        name_score = similarity(candidate.get("name"), product.name)
        if name_score < settings.duplicates.threshold:
            continue

        old_subtypes = product.subtypes or []
        if new_subtypes and old_subtypes:
            for new_subtype in new_subtypes:
                for old_subtype in old_subtypes:
                    if text_matches(new_subtype, old_subtype):
                        return {"name": product.name, "subtype": old_subtype, "unit": product.unit}
        elif name_score >= name_only_threshold:
            return {"name": product.name, "subtypes": old_subtypes, "unit": product.unit}
    return None


async def load_existing(table: Table) -> list:
    """Full scan of ``table`` for duplicate checks.

    With ``settings.duplicates.fail_open`` a failed read is logged and
    treated as an empty table, so the insert goes ahead unchecked.
    """
    try:
        return await table.list()
    except StoreError as e:
        if not settings.duplicates.fail_open:
            raise
        logger.warning(f"Duplicate check skipped, could not read {table.name}: {e}")
        return []


async def ensure_unique_order(table: Table, candidate: Mapping[str, Any]) -> None:
    existing = find_duplicate_order(candidate, await load_existing(table))
    if existing is not None:
        logger.info(f"Rejected duplicate order for {candidate.get('manufacturer')}")
        raise DuplicateConflict("order", existing)


async def ensure_unique_manufacturer(table: Table, candidate: Mapping[str, Any]) -> None:
    existing = find_duplicate_manufacturer(candidate, await load_existing(table))
    if existing is not None:
        logger.info(f"Rejected duplicate manufacturer {candidate.get('name')!r}")
        raise DuplicateConflict("manufacturer", existing)


async def ensure_unique_product(table: Table, candidate: Mapping[str, Any]) -> None:
    existing = find_duplicate_product(candidate, await load_existing(table))
    if existing is not None:
        logger.info(f"Rejected duplicate product {candidate.get('name')!r}")
        raise DuplicateConflict("product", existing)
