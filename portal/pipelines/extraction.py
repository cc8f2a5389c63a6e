"""Heuristic order-field extraction from PDF text.

Prefills the order form from an uploaded purchase document. Each field is
extracted independently: labelled values are matched with regexes on the
raw text (line breaks intact), product and subtype are first looked up in
keyword tables on the normalized text. A field that cannot be found is
returned as an empty string.
"""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass

from matching.keywords import PRODUCT_TABLE, SUBTYPE_TABLE, KeywordTable
from portal.parsers import ParseError, decode
from portal.pipelines.normalization import (
    normalize_document_text,
    normalize_whitespace,
    strip_edge_punctuation,
)

logger = logging.getLogger(__name__)

NO_TEXT_ERROR = "Could not extract text from PDF. The PDF may be image-based or corrupted."


@dataclass
class ExtractionResult:
    """Fields recovered from one document. Empty string means not found."""
    success: bool
    manufacturer: str = ""
    product: str = ""
    subtype: str = ""
    quantity: str = ""
    from_location: str = ""
    to_location: str = ""
    error: str | None = None

    @classmethod
    def failure(cls, error: str) -> ExtractionResult:
        return cls(success=False, error=error)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LabelRule:
    """Labels that introduce a field, and words that end its value."""
    labels: tuple[str, ...]
    stop_words: tuple[str, ...] = ()
    min_length: int = 3


def _label_pattern(label: str) -> re.Pattern:
    # "Party Name" also matches "Party  Name"
    label_re = r"\s+".join(re.escape(part) for part in label.split())
    return re.compile(rf"\b{label_re}[: ]+(.+)", re.IGNORECASE)


MANUFACTURER_RULE = LabelRule(
    labels=("Manufacturer", "Mfr", "Vendor", "Supplier", "Party Name"),
    stop_words=("product", "quantity", "price", "from", "to"),
)
PRODUCT_RULE = LabelRule(
    labels=("Product", "Item", "Material"),
    stop_words=("type", "quantity", "price", "from", "to"),
)
SUBTYPE_RULE = LabelRule(
    labels=("Type", "Product Type", "Subtype"),
    stop_words=("quantity", "price", "from", "to"),
    min_length=2,
)
FROM_RULE = LabelRule(
    labels=("From", "Origin", "Shipped From"),
    stop_words=("to", "destination", "delivery", "transport"),
)
TO_RULE = LabelRule(
    labels=("To", "Deliver To", "Destination", "Ship To"),
    stop_words=("transport", "rate", "distance", "estimated"),
)
QUANTITY_LABELS = ("Quantity", "Qty", "Ordered")

_QUANTITY_PATTERNS = [
    re.compile(rf"\b{label}[: ]+([0-9]+)", re.IGNORECASE) for label in QUANTITY_LABELS
]
_DIGITS_RE = re.compile(r"\d+")


def clean_value(value: str, stop_words: tuple[str, ...] = ()) -> str:
    """Trim punctuation, collapse whitespace and cut at the first stop word.

    A stop word only counts as a whole word after whitespace, so it marks
    where the next label bled into the captured value.
    """
    value = strip_edge_punctuation(value)
    value = normalize_whitespace(value)
    if stop_words:
        stop_re = re.compile(rf"\s+\b(?:{'|'.join(stop_words)})\b.*$", re.IGNORECASE)
        value = stop_re.sub("", value)
        value = strip_edge_punctuation(value)
    return value


def extract_labelled(text: str, rule: LabelRule) -> str | None:
    """Value of the first label in ``rule`` found in ``text``."""
    for label in rule.labels:
        match = _label_pattern(label).search(text)
        if not match:
            continue

        value = clean_value(match.group(1), rule.stop_words)
        if len(value) >= rule.min_length:
            return value
    return None


def extract_keyword_or_labelled(
    text: str,
    normalized_text: str,
    table: KeywordTable,
    rule: LabelRule,
) -> str | None:
    """Keyword table lookup first, labelled value as fallback."""
    return table.lookup(normalized_text) or extract_labelled(text, rule)


def extract_manufacturer(text: str) -> str | None:
    return extract_labelled(text, MANUFACTURER_RULE)


def extract_product(text: str, normalized_text: str) -> str | None:
    return extract_keyword_or_labelled(text, normalized_text, PRODUCT_TABLE, PRODUCT_RULE)


def extract_subtype(text: str, normalized_text: str) -> str | None:
    return extract_keyword_or_labelled(text, normalized_text, SUBTYPE_TABLE, SUBTYPE_RULE)


def extract_quantity(text: str) -> str | None:
    """First run of digits after a quantity label."""
    for pattern in _QUANTITY_PATTERNS:
        match = pattern.search(text)
        if match:
            digits = _DIGITS_RE.search(match.group(1))
            if digits:
                return digits.group(0)
    return None


def extract_from_location(text: str) -> str | None:
    return extract_labelled(text, FROM_RULE)


def extract_to_location(text: str) -> str | None:
    return extract_labelled(text, TO_RULE)


def extract(raw_text: str | None) -> ExtractionResult:
    """Extract order fields from raw document text.

    Args:
        raw_text: Text produced by the PDF decoder

    Returns:
        ExtractionResult. ``success`` is False only when there is no text;
        partially recognised documents still succeed with blank fields.
    """
    if not raw_text or not raw_text.strip():
        return ExtractionResult.failure(NO_TEXT_ERROR)

    normalized_text = normalize_document_text(raw_text)

    result = ExtractionResult(
        success=True,
        manufacturer=extract_manufacturer(raw_text) or "",
        product=extract_product(raw_text, normalized_text) or "",
        subtype=extract_subtype(raw_text, normalized_text) or "",
        quantity=extract_quantity(raw_text) or "",
        from_location=extract_from_location(raw_text) or "",
        to_location=extract_to_location(raw_text) or "",
    )

    found = [name for name, value in result.to_dict().items() if isinstance(value, str) and value]
    logger.info(f"Extracted {len(found)} fields from {len(raw_text)} chars: {', '.join(found) or 'none'}")
    return result


def extract_pdf(content: bytes) -> ExtractionResult:
    """Decode PDF bytes and extract order fields.

    Decoder errors become a failed result; nothing is retried.
    """
    try:
        decoded = decode(content)
    except ParseError as e:
        logger.error(f"PDF decoding failed: {e}")
        return ExtractionResult.failure(str(e))

    logger.debug(f"Decoded {decoded.pages} pages with {decoded.method}")
    return extract(decoded.text)
