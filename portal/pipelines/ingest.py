"""Ingestion pipelines: validate, check for duplicates, then write.

Callers pass snake_case field mappings (the API produces them from its
request models). Failures surface as FieldValidationError,
DuplicateConflict, RecordNotFound or StoreError.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .. import models
from ..db import RecordNotFound, RowStore
from ..validation import (
    FieldValidationError,
    validate_location,
    validate_name,
    validate_numeric,
    validate_phone,
    validate_unit,
)
from .duplicates import ensure_unique_manufacturer, ensure_unique_order, ensure_unique_product

logger = logging.getLogger(__name__)

MANUFACTURER_OPTIONAL_FIELDS = (
    "email",
    "contact_person_name",
    "contact_person_phone",
    "contact_person_email",
    "contact_person_designation",
    "gst_number",
    "website",
)


def _validate_product_core(fields: Mapping[str, Any]) -> dict[str, Any]:
    if not fields.get("name") or not fields.get("unit"):
        raise FieldValidationError("Please provide name and unit")

    specifications = (fields.get("specifications") or "").strip()
    if not specifications:
        raise FieldValidationError("Specifications is required. Please provide product specifications.")

    return {
        "name": validate_name(fields["name"], "Product name"),
        "unit": validate_unit(fields["unit"]),
        "specifications": specifications,
        "subtypes": [s.strip() for s in fields.get("subtypes") or [] if s and s.strip()],
    }


async def create_product(store: RowStore, fields: Mapping[str, Any]) -> models.Product:
    """Validate and insert a product."""
    candidate = _validate_product_core(fields)
    if not candidate["subtypes"]:
        raise FieldValidationError("At least one product type (subtype) must be provided")

    await ensure_unique_product(store.products, candidate)
    return await store.products.insert(candidate)


async def update_product(store: RowStore, product_id: int, fields: Mapping[str, Any]) -> models.Product:
    """Replace name, unit and specifications; an empty subtype list keeps the stored subtypes."""
    existing = await store.products.get(product_id)
    if existing is None:
        raise RecordNotFound(models.Product.__tablename__, product_id)

    changes = _validate_product_core(fields)
    if not changes["subtypes"]:
        del changes["subtypes"]

    return await store.products.update(product_id, changes)


async def delete_product(store: RowStore, product_id: int) -> None:
    await store.products.delete(product_id)


async def _validate_products_offered(store: RowStore, offered: list[Mapping[str, Any]]) -> list[dict]:
    """Each offered product type must be a known product subtype with a positive price."""
    known_subtypes = {subtype for product in await store.products.list() for subtype in product.subtypes or []}

    cleaned = []
    for item in offered:
        product_type = (item.get("product_type") or "").strip()
        price = item.get("price")
        if not product_type or not price:
            raise FieldValidationError("Each product must have productType and price")

        price = validate_numeric(price, "Product price", minimum=0.01)

        if product_type not in known_subtypes:
            raise FieldValidationError(
                f'Invalid product. Product type "{product_type}" does not exist in the Products database.'
            )
        cleaned.append({"product_type": product_type, "price": price})
    return cleaned


def _validate_manufacturer_core(fields: Mapping[str, Any]) -> dict[str, Any]:
    if not fields.get("name") or not fields.get("location") or not fields.get("contact"):
        raise FieldValidationError("Please provide name, location, and contact")

    validate_phone(fields["contact"])
    return {
        "name": validate_name(fields["name"], "Manufacturer name"),
        "location": validate_location(fields["location"]),
        "contact": fields["contact"].strip(),
    }


async def create_manufacturer(store: RowStore, fields: Mapping[str, Any]) -> models.Manufacturer:
    """Validate and insert a manufacturer with the product types it offers."""
    candidate = _validate_manufacturer_core(fields)

    offered = fields.get("products_offered") or []
    if not offered:
        raise FieldValidationError("At least one product must be provided")
    candidate["products_offered"] = await _validate_products_offered(store, offered)

    for key in MANUFACTURER_OPTIONAL_FIELDS:
        candidate[key] = fields.get(key) or ""

    await ensure_unique_manufacturer(store.manufacturers, candidate)
    return await store.manufacturers.insert(candidate)


async def update_manufacturer(
    store: RowStore,
    manufacturer_id: int,
    fields: Mapping[str, Any],
) -> models.Manufacturer:
    """Replace core fields; blank optional fields keep their stored values."""
    existing = await store.manufacturers.get(manufacturer_id)
    if existing is None:
        raise RecordNotFound(models.Manufacturer.__tablename__, manufacturer_id)

    changes = _validate_manufacturer_core(fields)

    offered = fields.get("products_offered")
    if offered:
        changes["products_offered"] = await _validate_products_offered(store, offered)

    for key in MANUFACTURER_OPTIONAL_FIELDS:
        if fields.get(key):
            changes[key] = fields[key]

    return await store.manufacturers.update(manufacturer_id, changes)


async def delete_manufacturer(store: RowStore, manufacturer_id: int) -> None:
    await store.manufacturers.delete(manufacturer_id)


async def create_order(store: RowStore, fields: Mapping[str, Any]) -> models.Order:
    """Validate and insert a purchase order."""
    required = ("manufacturer", "product", "product_type", "quantity", "from_location", "to_location")
    if any(not fields.get(key) for key in required) or fields.get("total_cost") is None:
        raise FieldValidationError("Please provide all required fields")

    from_location = validate_location(fields["from_location"], "From location")
    to_location = validate_location(fields["to_location"], "To location")
    if from_location.lower() == to_location.lower():
        raise FieldValidationError("From location and To location cannot be the same")

    candidate = {
        "manufacturer": validate_name(fields["manufacturer"], "Manufacturer"),
        "product": validate_name(fields["product"], "Product"),
        "product_type": validate_name(fields["product_type"], "Product type"),
        "quantity": validate_numeric(fields["quantity"], "Quantity", minimum=0.01),
        "from_location": from_location,
        "to_location": to_location,
        "transport_cost": validate_numeric(fields.get("transport_cost") or 0, "Transport cost", allow_zero=True, minimum=0),
        "product_cost": validate_numeric(fields.get("product_cost") or 0, "Product cost", allow_zero=True, minimum=0),
        "total_cost": validate_numeric(fields["total_cost"], "Total cost", allow_zero=True, minimum=0),
    }

    await ensure_unique_order(store.orders, candidate)
    order = await store.orders.insert(candidate)
    logger.info(f"Created order {order.id}: {order.quantity} x {order.product_type} from {order.manufacturer}")
    return order


async def delete_order(store: RowStore, order_id: int) -> None:
    await store.orders.delete(order_id)
