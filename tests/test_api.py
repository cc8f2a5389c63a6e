"""HTTP API tests using FastAPI's TestClient."""

from __future__ import annotations

import pytest

from portal.config import settings
from portal.parsers import DecodedText
from portal.pipelines import extraction

PHONE = "9876543210"


def create_product(client, name="Crash Barrier", subtypes=("W-Beam", "Thrie-Beam"), unit="m"):
    return client.post(
        "/products",
        json={"name": name, "subtypes": list(subtypes), "unit": unit, "specifications": "2.5 mm galvanised"},
    )


def order_body(**overrides) -> dict:
    body = {
        "manufacturer": "Apex Barriers",
        "product": "W Beam Crash Barrier",
        "productType": "W-Beam",
        "quantity": 500,
        "fromLocation": "Delhi",
        "toLocation": "Mumbai",
        "transportCost": 15000,
        "productCost": 600000,
        "totalCost": 615000,
    }
    body.update(overrides)
    return body


def test_health(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": settings.version, "db": "connected"}


def test_create_and_list_products(client) -> None:
    response = create_product(client)

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["productCode"] == "P001"
    assert data["subtypes"] == ["W-Beam", "Thrie-Beam"]

    listed = client.get("/products").json()
    assert [p["name"] for p in listed] == ["Crash Barrier"]


def test_product_validation_errors(client) -> None:
    response = client.post("/products", json={"name": "Paint", "unit": "bucket", "subtypes": ["White"], "specifications": "x"})

    assert response.status_code == 400
    assert response.json()["success"] is False
    assert "Invalid unit" in response.json()["message"]


def test_update_product(client) -> None:
    product_id = create_product(client).json()["data"]["id"]

    updated = client.put(
        f"/products/{product_id}",
        json={"name": "Crash Barrier Heavy", "subtypes": [], "unit": " Meters ", "specifications": "3 mm galvanised"},
    )

    assert updated.status_code == 200
    data = updated.json()["data"]
    assert data["name"] == "Crash Barrier Heavy"
    assert data["unit"] == "meters"
    assert data["specifications"] == "3 mm galvanised"
    assert data["subtypes"] == ["W-Beam", "Thrie-Beam"]

    retyped = client.put(
        f"/products/{product_id}",
        json={"name": "Crash Barrier Heavy", "subtypes": ["Double W-Beam"], "unit": "m", "specifications": "x"},
    )
    assert retyped.json()["data"]["subtypes"] == ["Double W-Beam"]


def test_update_product_rejects_invalid_fields(client) -> None:
    product_id = create_product(client).json()["data"]["id"]

    bad_unit = client.put(
        f"/products/{product_id}",
        json={"name": "Crash Barrier", "unit": "furlong", "specifications": "x"},
    )
    assert bad_unit.status_code == 400
    assert "Invalid unit" in bad_unit.json()["message"]

    no_specs = client.put(f"/products/{product_id}", json={"name": "Crash Barrier", "unit": "m"})
    assert no_specs.status_code == 400
    assert no_specs.json()["message"].startswith("Specifications is required")

    assert client.get("/products").json()[0]["unit"] == "m"


def test_update_missing_product(client) -> None:
    response = client.put("/products/99", json={"name": "Crash Barrier", "unit": "m", "specifications": "x"})

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Product not found"}


def test_duplicate_product(client) -> None:
    create_product(client)

    response = create_product(client, name="crash barrier", subtypes=("thrie-beam",))

    assert response.status_code == 409
    assert response.json()["existing"] == {"name": "Crash Barrier", "subtype": "Thrie-Beam", "unit": "m"}


def test_manufacturer_duplicate_on_trailing_whitespace(client) -> None:
    create_product(client)
    body = {
        "name": "ABC Industries",
        "location": "Faridabad",
        "contact": PHONE,
        "productsOffered": [{"productType": "W-Beam", "price": 1200}],
    }

    first = client.post("/manufacturers", json=body)
    assert first.status_code == 201
    assert first.json()["data"]["manufacturerCode"] == "M001"

    second = client.post("/manufacturers", json={**body, "name": "ABC Industries   "})

    assert second.status_code == 409
    payload = second.json()
    assert payload["success"] is False
    assert payload["message"] == "Duplicate entry detected"
    assert payload["existing"] == {
        "name": "ABC Industries",
        "location": "Faridabad",
        "productType": "W-Beam",
        "price": 1200.0,
    }
    assert len(client.get("/manufacturers").json()) == 1


def test_manufacturer_accepts_snake_case(client) -> None:
    create_product(client)

    response = client.post(
        "/manufacturers",
        json={
            "name": "Bharat Safety Works",
            "location": "Pune",
            "contact": PHONE,
            "gst_number": "27AAACB1234C1Z5",
            "products_offered": [{"product_type": "Thrie-Beam", "price": 1500}],
        },
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["gstNumber"] == "27AAACB1234C1Z5"
    assert data["productsOffered"] == [{"productType": "Thrie-Beam", "price": 1500.0}]


def test_manufacturer_unknown_product_type(client) -> None:
    create_product(client)

    response = client.post(
        "/manufacturers",
        json={
            "name": "Apex Barriers",
            "location": "Faridabad",
            "contact": PHONE,
            "productsOffered": [{"productType": "Yellow", "price": 90}],
        },
    )

    assert response.status_code == 400
    assert 'Product type "Yellow" does not exist' in response.json()["message"]


def test_update_and_delete_manufacturer(client) -> None:
    create_product(client)
    created = client.post(
        "/manufacturers",
        json={
            "name": "Apex Barriers",
            "location": "Faridabad",
            "contact": PHONE,
            "email": "sales@apex.example",
            "productsOffered": [{"productType": "W-Beam", "price": 1200}],
        },
    ).json()["data"]

    updated = client.put(
        f"/manufacturers/{created['id']}",
        json={"name": "Apex Barriers", "location": "Gurugram", "contact": PHONE},
    )

    assert updated.status_code == 200
    data = updated.json()["data"]
    assert data["location"] == "Gurugram"
    assert data["email"] == "sales@apex.example"
    assert data["productsOffered"] == [{"productType": "W-Beam", "price": 1200.0}]

    assert client.delete(f"/manufacturers/{created['id']}").status_code == 200
    missing = client.delete(f"/manufacturers/{created['id']}")
    assert missing.status_code == 404
    assert missing.json()["message"] == "Manufacturer not found"


def test_update_missing_manufacturer_with_invalid_body(client) -> None:
    response = client.put("/manufacturers/99", json={"name": "Apex", "location": "", "contact": "123"})

    assert response.status_code == 404
    assert response.json()["message"] == "Manufacturer not found"


def test_create_order_and_reject_duplicate(client) -> None:
    first = client.post("/orders", json=order_body())
    assert first.status_code == 201
    assert first.json()["data"]["fromLocation"] == "Delhi"

    duplicate = client.post("/orders", json=order_body(manufacturer="apex  barriers", toLocation="MUMBAI "))

    assert duplicate.status_code == 409
    existing = duplicate.json()["existing"]
    assert existing["manufacturer"] == "Apex Barriers"
    assert existing["quantity"] == 500.0
    assert existing["toLocation"] == "Mumbai"
    assert "createdAt" in existing

    different_quantity = client.post("/orders", json=order_body(quantity="750"))
    assert different_quantity.status_code == 201

    orders = client.get("/orders").json()
    assert [o["quantity"] for o in orders] == [750.0, 500.0]


@pytest.mark.parametrize(
    "overrides,message",
    [
        ({"toLocation": "delhi"}, "From location and To location cannot be the same"),
        ({"quantity": 0}, "Please provide all required fields"),
        ({"quantity": "-3"}, "Quantity must be at least 0.01"),
        ({"quantity": "inf"}, "Quantity must be a valid number"),
        ({"quantity": "1e400"}, "Quantity must be a valid number"),
        ({"totalCost": None}, "Please provide all required fields"),
        ({"product": "Barrier #1"}, "Product can only contain"),
    ],
)
def test_order_validation(client, overrides: dict, message: str) -> None:
    response = client.post("/orders", json=order_body(**overrides))

    assert response.status_code == 400
    assert message in response.json()["message"]


def test_delete_missing_order(client) -> None:
    response = client.delete("/orders/99")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Order not found"}


def test_pdf_extract(client, monkeypatch) -> None:
    monkeypatch.setattr(
        extraction,
        "decode",
        lambda content: DecodedText(text="Manufacturer: ABC Steel\nQuantity: 500\nFrom: Delhi\nTo: Mumbai"),
    )

    response = client.post("/pdf/extract", files={"file": ("po.pdf", b"%PDF-1.4 stub", "application/pdf")})

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "manufacturer": "ABC Steel",
        "product": "",
        "subtype": "",
        "quantity": "500",
        "fromLocation": "Delhi",
        "toLocation": "Mumbai",
    }


def test_pdf_rejects_other_files(client) -> None:
    response = client.post("/pdf/extract", files={"file": ("po.txt", b"Manufacturer: ABC", "text/plain")})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid file type. Only PDF files are allowed."}


def test_pdf_too_large(client, monkeypatch) -> None:
    monkeypatch.setattr(settings.pdf, "max_upload_bytes", 1024 * 1024)

    response = client.post(
        "/pdf/extract",
        files={"file": ("big.pdf", b"%PDF" + b"0" * (1024 * 1024), "application/pdf")},
    )

    assert response.status_code == 400
    assert response.json()["error"] == "File too large. Maximum size is 1MB."


def test_pdf_size_checked_before_type(client, monkeypatch) -> None:
    monkeypatch.setattr(settings.pdf, "max_upload_bytes", 1024 * 1024)

    response = client.post(
        "/pdf/extract",
        files={"file": ("notes.txt", b"x" * (2 * 1024 * 1024), "text/plain")},
    )

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "File too large. Maximum size is 1MB."}


def test_pdf_without_text(client, blank_pdf: bytes) -> None:
    response = client.post("/pdf/extract", files={"file": ("scan.pdf", blank_pdf, "application/pdf")})

    assert response.status_code == 400
    assert response.json() == {"success": False, "error": extraction.NO_TEXT_ERROR}
