"""FastAPI app for the purchase portal: catalogue CRUD, orders and PDF prefill.

Request and response bodies are camelCase on the wire; request models also
accept snake_case names and are dumped to snake_case before reaching the
pipelines and the store.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Generic, TypeVar

from fastapi import APIRouter, Depends, FastAPI, File, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from . import models
from .config import settings
from .db import RecordNotFound, RowStore, StoreError, get_store
from .logging_config import setup_logging
from .parsers import FileType, detect_file_type
from .pipelines import ingest
from .pipelines.duplicates import DuplicateConflict
from .pipelines.extraction import extract_pdf
from .validation import FieldValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CamelModel(BaseModel):
    """Accepts camelCase or snake_case input, emits camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Pydantic request/response models
class HealthResponse(CamelModel):
    """Health check response."""
    status: str
    version: str
    db: str


class ErrorResponse(CamelModel):
    """Error response."""
    success: bool = False
    message: str
    existing: dict[str, Any] | None = None


class DataResponse(CamelModel, Generic[T]):
    """Successful write wrapping the stored record."""
    success: bool = True
    data: T


class MessageResponse(CamelModel):
    success: bool = True
    message: str


class ProductRequest(CamelModel):
    """Create/update product request."""
    name: str | None = None
    subtypes: list[str] = Field(default_factory=list)
    unit: str | None = None
    specifications: str | None = None


class ProductDTO(CamelModel):
    id: int
    product_code: str
    name: str
    subtypes: list[str]
    unit: str
    specifications: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: models.Product) -> ProductDTO:
        return cls(
            id=row.id,
            product_code=f"P{row.id:03d}",
            name=row.name,
            subtypes=row.subtypes or [],
            unit=row.unit,
            specifications=row.specifications or "",
            created_at=row.created_at,
        )


class ProductOfferedDTO(CamelModel):
    """Product type a manufacturer offers, with its price."""
    product_type: str | None = None
    price: float | None = None


class ManufacturerRequest(CamelModel):
    """Create/update manufacturer request."""
    name: str | None = None
    location: str | None = None
    contact: str | None = None
    email: str | None = None
    contact_person_name: str | None = None
    contact_person_phone: str | None = None
    contact_person_email: str | None = None
    contact_person_designation: str | None = None
    gst_number: str | None = None
    website: str | None = None
    products_offered: list[ProductOfferedDTO] | None = None


class ManufacturerDTO(CamelModel):
    id: int
    manufacturer_code: str
    name: str
    location: str
    contact: str
    email: str = ""
    contact_person_name: str = ""
    contact_person_phone: str = ""
    contact_person_email: str = ""
    contact_person_designation: str = ""
    gst_number: str = ""
    website: str = ""
    products_offered: list[ProductOfferedDTO] = Field(default_factory=list)
    created_at: datetime

    @classmethod
    def from_row(cls, row: models.Manufacturer) -> ManufacturerDTO:
        return cls(
            id=row.id,
            manufacturer_code=f"M{row.id:03d}",
            name=row.name,
            location=row.location,
            contact=row.contact,
            email=row.email or "",
            contact_person_name=row.contact_person_name or "",
            contact_person_phone=row.contact_person_phone or "",
            contact_person_email=row.contact_person_email or "",
            contact_person_designation=row.contact_person_designation or "",
            gst_number=row.gst_number or "",
            website=row.website or "",
            products_offered=[ProductOfferedDTO(**p) for p in row.products_offered or []],
            created_at=row.created_at,
        )


class OrderRequest(CamelModel):
    """Create order request."""
    manufacturer: str | None = None
    product: str | None = None
    product_type: str | None = None
    quantity: float | str | None = None
    from_location: str | None = None
    to_location: str | None = None
    transport_cost: float | None = None
    product_cost: float | None = None
    total_cost: float | None = None


class OrderDTO(CamelModel):
    id: int
    manufacturer: str
    product: str
    product_type: str
    quantity: float
    from_location: str
    to_location: str
    transport_cost: float
    product_cost: float
    total_cost: float
    created_at: datetime

    @classmethod
    def from_row(cls, row: models.Order) -> OrderDTO:
        return cls(
            id=row.id,
            manufacturer=row.manufacturer,
            product=row.product,
            product_type=row.product_type,
            quantity=row.quantity,
            from_location=row.from_location,
            to_location=row.to_location,
            transport_cost=row.transport_cost,
            product_cost=row.product_cost,
            total_cost=row.total_cost,
            created_at=row.created_at,
        )


class ExtractionResponse(CamelModel):
    """Fields recovered from an uploaded PDF; empty strings mean not found."""
    success: bool
    manufacturer: str = ""
    product: str = ""
    subtype: str = ""
    quantity: str = ""
    from_location: str = ""
    to_location: str = ""


def _camelize(snapshot: dict[str, Any]) -> dict[str, Any]:
    return {to_camel(key): value for key, value in snapshot.items()}


def _upload_error(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "error": message},
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown logic."""
    # Startup
    setup_logging()
    logger.info("Application starting up")

    store: RowStore = app.state.store
    await store.open(create_all=settings.db.create_all)

    yield

    # Shutdown
    await store.close()
    logger.info("Application shutting down")


router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(store: RowStore = Depends(get_store)) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        version=settings.version,
        db="connected" if await store.ping() else "error",
    )


@router.get("/products", response_model=list[ProductDTO])
async def list_products(store: RowStore = Depends(get_store)) -> list[ProductDTO]:
    return [ProductDTO.from_row(row) for row in await store.products.list()]


@router.post("/products", response_model=DataResponse[ProductDTO], status_code=status.HTTP_201_CREATED)
async def create_product(
    request: ProductRequest,
    store: RowStore = Depends(get_store),
) -> DataResponse[ProductDTO]:
    logger.info(f"Creating product: {request.name}")
    product = await ingest.create_product(store, request.model_dump())
    return DataResponse[ProductDTO](data=ProductDTO.from_row(product))


@router.put("/products/{product_id}", response_model=DataResponse[ProductDTO])
async def update_product(
    product_id: int,
    request: ProductRequest,
    store: RowStore = Depends(get_store),
) -> DataResponse[ProductDTO]:
    product = await ingest.update_product(store, product_id, request.model_dump())
    return DataResponse[ProductDTO](data=ProductDTO.from_row(product))


@router.delete("/products/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: int, store: RowStore = Depends(get_store)) -> MessageResponse:
    await ingest.delete_product(store, product_id)
    return MessageResponse(message="Product deleted successfully")


@router.get("/manufacturers", response_model=list[ManufacturerDTO])
async def list_manufacturers(store: RowStore = Depends(get_store)) -> list[ManufacturerDTO]:
    return [ManufacturerDTO.from_row(row) for row in await store.manufacturers.list()]


@router.post(
    "/manufacturers",
    response_model=DataResponse[ManufacturerDTO],
    status_code=status.HTTP_201_CREATED,
)
async def create_manufacturer(
    request: ManufacturerRequest,
    store: RowStore = Depends(get_store),
) -> DataResponse[ManufacturerDTO]:
    """Create a manufacturer.

    Rejected with 409 when a manufacturer with a similar name already offers
    a similar product type.
    """
    logger.info(f"Creating manufacturer: {request.name}")
    manufacturer = await ingest.create_manufacturer(store, request.model_dump())
    return DataResponse[ManufacturerDTO](data=ManufacturerDTO.from_row(manufacturer))


@router.put("/manufacturers/{manufacturer_id}", response_model=DataResponse[ManufacturerDTO])
async def update_manufacturer(
    manufacturer_id: int,
    request: ManufacturerRequest,
    store: RowStore = Depends(get_store),
) -> DataResponse[ManufacturerDTO]:
    manufacturer = await ingest.update_manufacturer(store, manufacturer_id, request.model_dump())
    return DataResponse[ManufacturerDTO](data=ManufacturerDTO.from_row(manufacturer))


@router.delete("/manufacturers/{manufacturer_id}", response_model=MessageResponse)
async def delete_manufacturer(manufacturer_id: int, store: RowStore = Depends(get_store)) -> MessageResponse:
    await ingest.delete_manufacturer(store, manufacturer_id)
    return MessageResponse(message="Manufacturer deleted successfully")


@router.get("/orders", response_model=list[OrderDTO])
async def list_orders(store: RowStore = Depends(get_store)) -> list[OrderDTO]:
    rows = await store.orders.list()
    # Newest first
    return [OrderDTO.from_row(row) for row in reversed(rows)]


@router.post("/orders", response_model=DataResponse[OrderDTO], status_code=status.HTTP_201_CREATED)
async def create_order(
    request: OrderRequest,
    store: RowStore = Depends(get_store),
) -> DataResponse[OrderDTO]:
    """Create a purchase order.

    Rejected with 409 when an existing order matches on manufacturer,
    product, product type, quantity and both locations.
    """
    order = await ingest.create_order(store, request.model_dump())
    return DataResponse[OrderDTO](data=OrderDTO.from_row(order))


@router.delete("/orders/{order_id}", response_model=MessageResponse)
async def delete_order(order_id: int, store: RowStore = Depends(get_store)) -> MessageResponse:
    await ingest.delete_order(store, order_id)
    return MessageResponse(message="Order deleted successfully")


@router.post("/pdf/extract", response_model=ExtractionResponse)
async def extract_order_fields(
    file: UploadFile = File(..., description="Purchase order PDF"),
):
    """Prefill order fields from an uploaded PDF.

    Returns 400 with ``{"success": false, "error": ...}`` when the file is
    not a PDF, is too large, or has no extractable text.
    """
    max_bytes = settings.pdf.max_upload_bytes
    too_large = f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB."

    # Reject on the declared size before buffering the body
    if file.size is not None and file.size > max_bytes:
        await file.close()
        return _upload_error(too_large)

    try:
        content = await file.read(max_bytes + 1)
    finally:
        await file.close()

    if detect_file_type(file.filename or "", content) != FileType.PDF:
        return _upload_error("Invalid file type. Only PDF files are allowed.")

    if len(content) > max_bytes:
        return _upload_error(too_large)

    logger.info(f"Received PDF upload: {file.filename} ({len(content)} bytes)")
    result = await run_in_threadpool(extract_pdf, content)

    if not result.success:
        return _upload_error(result.error)

    return ExtractionResponse(
        success=True,
        manufacturer=result.manufacturer,
        product=result.product,
        subtype=result.subtype,
        quantity=result.quantity,
        from_location=result.from_location,
        to_location=result.to_location,
    )


# Exception handlers
async def validation_error_handler(request: Request, exc: FieldValidationError):
    """Handle rejected field values."""
    logger.info(f"Validation failed: {exc}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(message=str(exc)).model_dump(by_alias=True, exclude_none=True),
    )


async def duplicate_conflict_handler(request: Request, exc: DuplicateConflict):
    """Handle duplicate inserts with a snapshot of the existing record."""
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=ErrorResponse(
            message="Duplicate entry detected",
            existing=_camelize(exc.existing),
        ).model_dump(by_alias=True),
    )


async def not_found_handler(request: Request, exc: RecordNotFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=ErrorResponse(message=f"{exc.table.rstrip('s').capitalize()} not found").model_dump(
            by_alias=True, exclude_none=True
        ),
    )


async def store_error_handler(request: Request, exc: StoreError):
    """Handle database failures."""
    logger.error(f"Store error: {exc}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(message=str(exc)).model_dump(by_alias=True, exclude_none=True),
    )


def create_app(store: RowStore | None = None) -> FastAPI:
    """Build the application around ``store`` (defaults to ``settings.db``)."""
    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        description="Purchase management for safety products with duplicate detection and PDF prefill",
        lifespan=lifespan,
    )
    app.state.store = store or RowStore(settings.db.url, echo=settings.db.echo)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(FieldValidationError, validation_error_handler)
    app.add_exception_handler(DuplicateConflict, duplicate_conflict_handler)
    app.add_exception_handler(RecordNotFound, not_found_handler)
    app.add_exception_handler(StoreError, store_error_handler)

    app.include_router(router)
    return app


app = create_app()
