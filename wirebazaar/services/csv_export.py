"""
CSV exports for the owner dashboard (orders, products, inquiries).
"""

import csv
import io
import json
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from wirebazaar.database.row_mappers import (
    inquiry_to_row,
    order_export_row,
    product_to_row,
)
from wirebazaar.models.storefront import Inquiry, Order, Product

logger = logging.getLogger(__name__)


def _render_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def export_rows_to_csv(rows: Sequence[Dict[str, Any]]) -> Optional[str]:
    """
    Render rows as CSV. The header line is the keys of the first row; every
    data field is double-quoted with inner quotes doubled.

    Returns:
        CSV text, or None when there is nothing to export
    """
    if not rows:
        logger.warning("No data to export")
        return None

    headers = list(rows[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for row in rows:
        writer.writerow([_render_value(row.get(header)) for header in headers])

    return ",".join(headers) + "\n" + buffer.getvalue().rstrip("\n")


def export_filename(kind: str, today: Optional[date] = None) -> str:
    """`<kind>_<YYYY-MM-DD>.csv`"""
    return f"{kind}_{(today or date.today()).isoformat()}.csv"


def orders_csv(orders: List[Order]) -> Optional[str]:
    return export_rows_to_csv([order_export_row(order) for order in orders])


def products_csv(products: List[Product]) -> Optional[str]:
    rows = []
    for product in products:
        row = {"id": product.id}
        row.update(product_to_row(product))
        rows.append(row)
    return export_rows_to_csv(rows)


def inquiries_csv(inquiries: List[Inquiry]) -> Optional[str]:
    rows = []
    for inquiry in inquiries:
        row = {"id": inquiry.id}
        row.update(inquiry_to_row(inquiry))
        row.update({
            "is_verified": inquiry.is_verified,
            "status": inquiry.status,
            "created_at": inquiry.created_at,
            "updated_at": inquiry.updated_at,
        })
        rows.append(row)
    return export_rows_to_csv(rows)
