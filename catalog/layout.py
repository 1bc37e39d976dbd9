"""
Layout engine module for the catalog PDF generator.

This module handles:
- Page geometry (A4 in millimetres, margins, header and footer reserves)
- Fitting images into square boxes while keeping their aspect ratio
- Packing product cards into the 4-column grid, page by page

Planning is kept apart from drawing: ``GridLayoutEngine.plan_page`` only
computes where each card goes, and the renderer draws the plan.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Set, Tuple

from loguru import logger

from .errors import GridOverflowError
from .grouping import GroupIndex
from .models import Product, ProductGroup

A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0


class LayoutPosition:
    """Represents a position and size on the page (millimetres, top-left origin)."""

    def __init__(self, x: float, y: float, width: float, height: float):
        self.x = x
        self.y = y
        self.width = width
        self.height = height

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def __eq__(self, other) -> bool:
        if not isinstance(other, LayoutPosition):
            return NotImplemented
        return (self.x, self.y, self.width, self.height) == (other.x, other.y, other.width, other.height)

    def __repr__(self) -> str:
        return f"LayoutPosition({self.x:.2f}, {self.y:.2f}, {self.width:.2f}, {self.height:.2f})"


@dataclass(frozen=True)
class PageGeometry:
    width: float = A4_WIDTH_MM
    height: float = A4_HEIGHT_MM
    margin: float = 10.0

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin


@dataclass(frozen=True)
class GridGeometry:
    page: PageGeometry = PageGeometry()
    columns: int = 4
    gap: float = 2.5
    extra_card_height: float = 32.0
    footer_reserve: float = 12.0

    @property
    def card_width(self) -> float:
        return (self.page.content_width - (self.columns - 1) * self.gap) / self.columns

    @property
    def card_height(self) -> float:
        return self.card_width + self.extra_card_height

    @property
    def bottom_limit(self) -> float:
        return self.page.height - self.footer_reserve

    def cell(self, row: int, col: int, start_y: float, span: int = 1) -> LayoutPosition:
        x = self.page.margin + col * (self.card_width + self.gap)
        y = start_y + row * (self.card_height + self.gap)
        width = self.card_width * span + self.gap * (span - 1)
        return LayoutPosition(x, y, width, self.card_height)

    def fits(self, position: LayoutPosition) -> bool:
        return position.bottom <= self.bottom_limit


def fit_into_box(image_size: Tuple[int, int], box: LayoutPosition) -> LayoutPosition:
    """
    Scale an image to fit inside ``box`` keeping its aspect ratio, centred.
    Degenerate image sizes fill the whole box.
    """
    img_width, img_height = image_size
    if img_width <= 0 or img_height <= 0:
        return LayoutPosition(box.x, box.y, box.width, box.height)

    scale = min(box.width / img_width, box.height / img_height)
    new_width = img_width * scale
    new_height = img_height * scale

    x = box.x + (box.width - new_width) / 2
    y = box.y + (box.height - new_height) / 2
    return LayoutPosition(x, y, new_width, new_height)


@dataclass
class GridPlacement:
    """One card of a grid page: a single product or a variation group"""
    position: LayoutPosition
    product: Optional[Product] = None
    group: Optional[ProductGroup] = None
    variations: List[Product] = field(default_factory=list)
    backfill: bool = False

    @property
    def is_group(self) -> bool:
        return self.group is not None

    @property
    def products(self) -> List[Product]:
        return list(self.variations) if self.is_group else [self.product]


@dataclass
class GridPageResult:
    placements: List[GridPlacement]
    consumed: int
    remaining: List[Product]


class GridLayoutEngine:
    """Packs product cards into a fixed-column grid, one page at a time."""

    def __init__(self, group_index: GroupIndex, geometry: Optional[GridGeometry] = None,
                 restrict_backfill_to_category: bool = True):
        self.group_index = group_index
        self.geometry = geometry or GridGeometry()
        self.restrict_backfill_to_category = restrict_backfill_to_category

    def _pending_members(self, product: Product, products: List[Product], placed_ids: Set[str]) -> List[Product]:
        """Members of the product's variation group still waiting in this work list"""
        group = self.group_index.group_of(product)
        if group is None or not group.is_variation_group:
            return [product]

        member_ids = {v.id for v in group.variations}
        pending = [p for p in products if p.id in member_ids and p.id not in placed_ids]
        # Group card rows follow the group's creation order
        order = {v.id: i for i, v in enumerate(group.variations)}
        return sorted(pending, key=lambda p: order[p.id])

    def _find_backfill(self, products: List[Product], start: int, placed_ids: Set[str],
                       category_id: Optional[str]) -> Optional[int]:
        """Index of the next pending product that takes a single cell, scanning in input order"""
        for i in range(start, len(products)):
            candidate = products[i]
            if candidate.id in placed_ids:
                continue
            if self.restrict_backfill_to_category and category_id and candidate.category_id != category_id:
                continue
            if len(self._pending_members(candidate, products, placed_ids)) == 1:
                return i
        return None

    def plan_page(self, products: List[Product], start_y: float) -> GridPageResult:
        """
        Lay out as many cards as fit below ``start_y``.

        Returns the placements in drawing order, the number of source
        products placed, and the products still waiting (input order).
        """
        geometry = self.geometry
        columns = geometry.columns

        placements: List[GridPlacement] = []
        placed_ids: Set[str] = set()
        row, col = 0, 0
        index = 0

        while index < len(products):
            product = products[index]
            if product.id in placed_ids:
                index += 1
                continue

            members = self._pending_members(product, products, placed_ids)
            span = 2 if len(members) > 1 else 1

            if col + span > columns:
                if span == 2 and col == columns - 1:
                    backfill_index = self._find_backfill(products, index + 1, placed_ids, product.category_id)
                    if backfill_index is not None:
                        position = geometry.cell(row, col, start_y)
                        if geometry.fits(position):
                            backfill_product = products[backfill_index]
                            placements.append(GridPlacement(position, product=backfill_product, backfill=True))
                            placed_ids.add(backfill_product.id)
                row += 1
                col = 0

            position = geometry.cell(row, col, start_y, span)
            if not geometry.fits(position):
                break

            if span == 2:
                group = self.group_index.group_of(product)
                placements.append(GridPlacement(position, group=group, variations=members))
                placed_ids.update(m.id for m in members)
            else:
                placements.append(GridPlacement(position, product=product))
                placed_ids.add(product.id)

            col += span
            if col >= columns:
                row += 1
                col = 0
            index += 1

        remaining = [p for p in products if p.id not in placed_ids]
        consumed = len(products) - len(remaining)

        if products and consumed == 0:
            raise GridOverflowError(start_y, geometry.card_height, geometry.page.height)

        logger.debug(f"Grid page planned: {len(placements)} cards, {consumed} products, {len(remaining)} left")
        return GridPageResult(placements=placements, consumed=consumed, remaining=remaining)
