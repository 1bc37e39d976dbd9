"""
Badge composition for product cards.

Decides which of the PROMOTION / BEST_SELLER / NEW labels apply to a
product or a variation group. Promotion wins over best seller, best seller
over new, and at most two tags are shown.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .models import BestSeller, DiscountType, Product, ProductGroup, Promotion
from .utils import format_amount, format_number

MAX_TAGS = 2
NEW_PRODUCT_DAYS = 21


class TagKind(str, Enum):
    PROMOTION = 'promotion'
    BEST_SELLER = 'bestseller'
    NEW = 'new'


TAG_COLORS = {
    TagKind.PROMOTION: (239, 68, 68),
    TagKind.BEST_SELLER: (34, 197, 94),
    TagKind.NEW: (37, 99, 235),
}

FULL_LABELS = {
    TagKind.PROMOTION: 'PROMOCIÓN',
    TagKind.BEST_SELLER: 'MÁS VENDIDO',
    TagKind.NEW: 'NUEVO',
}

# Narrow grid cards
COMPACT_LABELS = {
    TagKind.PROMOTION: 'PROMO',
    TagKind.BEST_SELLER: 'TOP',
    TagKind.NEW: 'NUEVO',
}


@dataclass(frozen=True)
class Tag:
    kind: TagKind
    color: Tuple[int, int, int]
    label: str


def find_promotion(product_id: str, promotions: Iterable[Promotion]) -> Optional[Promotion]:
    """First active promotion for the product, if any"""
    for promotion in promotions or ():
        if promotion.product_id == product_id and promotion.active:
            return promotion
    return None


def is_best_seller(product_id: str, best_sellers: Iterable[BestSeller]) -> bool:
    return any(bs.product_id == product_id and bs.active for bs in best_sellers or ())


def is_new_product(created_at: datetime, now: Optional[datetime] = None, days: int = NEW_PRODUCT_DAYS) -> bool:
    """
    True when the product was created within the last ``days`` calendar days.

    Compared by date in ``now``'s timezone, so a product created exactly
    ``days`` days ago still counts as new.
    """
    if now is None:
        now = datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=now.tzinfo)

    created_day = created_at.astimezone(now.tzinfo).date()
    cutoff_day = (now - timedelta(days=days)).date()
    return created_day >= cutoff_day


def compose_tags(has_promotion: bool, has_best_seller: bool, is_new: bool, compact: bool = False) -> List[Tag]:
    labels = COMPACT_LABELS if compact else FULL_LABELS

    kinds = []
    if has_promotion:
        kinds.append(TagKind.PROMOTION)
    if has_best_seller:
        kinds.append(TagKind.BEST_SELLER)
    if is_new and len(kinds) < MAX_TAGS:
        kinds.append(TagKind.NEW)

    return [Tag(kind, TAG_COLORS[kind], labels[kind]) for kind in kinds[:MAX_TAGS]]


def tags_for_product(product: Product,
                     promotions: Iterable[Promotion],
                     best_sellers: Iterable[BestSeller],
                     now: Optional[datetime] = None,
                     compact: bool = False,
                     new_days: int = NEW_PRODUCT_DAYS) -> List[Tag]:
    return compose_tags(
        find_promotion(product.id, promotions) is not None,
        is_best_seller(product.id, best_sellers),
        is_new_product(product.created_at, now, new_days),
        compact=compact
    )


def tags_for_group(group: ProductGroup,
                   promotions: Iterable[Promotion],
                   best_sellers: Iterable[BestSeller],
                   now: Optional[datetime] = None,
                   compact: bool = False,
                   new_days: int = NEW_PRODUCT_DAYS,
                   variations: Optional[List[Product]] = None) -> List[Tag]:
    """Tags for a group card: a tag applies when any variation qualifies"""
    members = variations if variations is not None else group.variations
    return compose_tags(
        any(find_promotion(v.id, promotions) is not None for v in members),
        any(is_best_seller(v.id, best_sellers) for v in members),
        any(is_new_product(v.created_at, now, new_days) for v in members),
        compact=compact
    )


def discount_label(promotion: Promotion, currency_prefix: str = "Gs.") -> str:
    if promotion.discount_type == DiscountType.PERCENTAGE:
        return f"-{format_number(promotion.discount_value)}%"
    return f"-{currency_prefix} {format_amount(promotion.discount_value)}"
