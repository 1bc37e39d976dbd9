"""
Best-seller resolution.

Combines manually curated best sellers with the top products by sold
quantity. Cancelled sales do not count, and a manual entry shadows the
computed one for the same product.
"""

from typing import Any, Dict, Iterable, List

from loguru import logger

from .models import BestSeller

DEFAULT_TOP_SELLERS = 20
CANCELLED_STATUS = 'cancelled'


def _payment_status(item: Dict[str, Any]) -> Any:
    sale = item.get('sales') or {}
    return sale.get('payment_status', item.get('payment_status'))


def top_selling_product_ids(sale_items: Iterable[Dict[str, Any]], limit: int = DEFAULT_TOP_SELLERS) -> List[str]:
    """
    Product ids ranked by total sold quantity, highest first.

    Each item is a sale line: ``{'product_id', 'quantity', 'sales': {'payment_status'}}``.
    Ties keep the order in which products were first seen.
    """
    totals: Dict[str, float] = {}
    for item in sale_items:
        if _payment_status(item) == CANCELLED_STATUS:
            continue
        product_id = item.get('product_id')
        if not product_id:
            continue
        totals[product_id] = totals.get(product_id, 0) + float(item.get('quantity') or 0)

    ranked = sorted(totals.items(), key=lambda entry: entry[1], reverse=True)
    return [product_id for product_id, _ in ranked[:limit]]


def resolve_best_sellers(manual: Iterable[BestSeller],
                         sale_items: Iterable[Dict[str, Any]] = (),
                         limit: int = DEFAULT_TOP_SELLERS) -> List[BestSeller]:
    """Manual active entries first, then computed top sellers not already listed"""
    manual_active = [bs for bs in manual if bs.active]
    manual_ids = {bs.product_id for bs in manual_active}

    computed = [
        BestSeller(product_id=product_id, active=True)
        for product_id in top_selling_product_ids(sale_items, limit)
        if product_id not in manual_ids
    ]

    logger.debug(f"Resolved best sellers: {len(manual_active)} manual, {len(computed)} computed")
    return manual_active + computed
