"""
Rendering module for the catalog PDF generator.

This module handles:
- Page chrome (black header band with title, category and logo; footer band)
- The one-product-per-page layout
- Grid cards: single product cards and double-width variation group cards
- Badge rows and the price blocks

All drawing goes through ``CatalogCanvas`` in millimetres. Images are
resolved one at a time, in drawing order.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from loguru import logger

from .badges import Tag, TagKind, discount_label, find_promotion, tags_for_group, tags_for_product
from .canvas import CatalogCanvas
from .config import AppConfig
from .images import ImagePayload, ImageResolver, placeholder_image
from .layout import GridPlacement, LayoutPosition, PageGeometry, fit_into_box
from .models import Product, ProductGroup, RenderOptions
from .utils import format_price

BLACK = (0, 0, 0)
WHITE = (255, 255, 255)
INK = (29, 29, 27)
GREY_TEXT = (100, 100, 100)
YELLOW = (250, 234, 43)
RED = (239, 68, 68)
GREEN = (34, 197, 94)
BLUE = (41, 98, 255)


@dataclass
class RenderContext:
    """Everything the drawing functions share for one generation run"""
    canvas: CatalogCanvas
    options: RenderOptions
    config: AppConfig
    resolver: ImageResolver
    geometry: PageGeometry = field(default_factory=PageGeometry)
    now: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def price(self, value: float) -> str:
        return format_price(value, self.config.CURRENCY_PREFIX)

    def tags_for(self, product: Product, compact: bool = False) -> List[Tag]:
        return tags_for_product(product, self.options.promotions, self.options.best_sellers,
                                now=self.now, compact=compact, new_days=self.config.NEW_PRODUCT_DAYS)


def draw_image(ctx: RenderContext, url: Optional[str], box: LayoutPosition, background=None):
    """Resolve ``url`` and draw it fitted into ``box``; falls back to the placeholder"""
    if background:
        ctx.canvas.rect(box.x, box.y, box.width, box.height, fill=background, radius=2)

    payload = ctx.resolver.resolve(url)
    try:
        _place_image(ctx, payload, box)
    except (OSError, ValueError) as e:
        logger.warning(f"Could not embed image {url}: {e}")
        if not payload.is_placeholder:
            _place_image(ctx, placeholder_image(), box)


def _place_image(ctx: RenderContext, payload: ImagePayload, box: LayoutPosition):
    target = fit_into_box((payload.width, payload.height), box)
    ctx.canvas.image(payload.image, target)


def draw_tag_row(ctx: RenderContext, tags: List[Tag], right_x: float, y: float, tag_width: float,
                 tag_height: float, gap: float, font_size: float, radius: float, text_offset: float,
                 font_sizes: Optional[dict] = None):
    """Draw tags left to right so that the row ends at ``right_x``"""
    if not tags:
        return
    total_width = tag_width * len(tags) + gap * (len(tags) - 1)
    x = right_x - total_width
    for tag in tags:
        size = (font_sizes or {}).get(tag.kind, font_size)
        ctx.canvas.rect(x, y, tag_width, tag_height, fill=tag.color, radius=radius)
        ctx.canvas.text(tag.label, x + tag_width / 2, y + text_offset, size=size, bold=True,
                        color=WHITE, align='center')
        x += tag_width + gap


class PageChrome:
    """Header and footer bands drawn on every page"""

    FOOTER_HEIGHT = 15.0
    LOGO_HEIGHT = 10.0

    def __init__(self, ctx: RenderContext):
        self.ctx = ctx
        self._logo: Optional[ImagePayload] = None
        self._logo_loaded = False

    @property
    def logo(self) -> Optional[ImagePayload]:
        """Fetched once per run; a missing logo is not an error"""
        if not self._logo_loaded:
            self._logo_loaded = True
            self._logo = self.ctx.resolver.fetch(self.ctx.config.LOGO_URL)
            if self._logo is None and self.ctx.config.LOGO_URL:
                logger.warning("Logo could not be loaded; headers will be drawn without it")
        return self._logo

    def header_height(self, category: Optional[str]) -> float:
        return 20.0 if category else 16.0

    def draw_header(self, title: str, category: Optional[str] = None) -> float:
        """Draw the header band and return the y where page content starts"""
        canvas = self.ctx.canvas
        geometry = self.ctx.geometry
        config = self.ctx.config
        height = self.header_height(category)

        canvas.rect(0, 0, geometry.width, height, fill=BLACK)

        logo = self.logo
        if logo is not None:
            logo_width = self.LOGO_HEIGHT * config.LOGO_WIDTH_PX / config.LOGO_HEIGHT_PX
            box = LayoutPosition(geometry.width - geometry.margin - logo_width,
                                 (height - self.LOGO_HEIGHT) / 2, logo_width, self.LOGO_HEIGHT)
            try:
                canvas.image(logo.image, box)
            except (OSError, ValueError) as e:
                logger.warning(f"Could not embed logo: {e}")

        if category:
            canvas.text(title, geometry.margin, 8, size=10, bold=True, color=WHITE)
            canvas.text(category, geometry.margin, 15, size=8, color=YELLOW)
        else:
            canvas.text(title, geometry.margin, height / 2 + 2, size=10, bold=True, color=WHITE)

        canvas.page.category = category
        return height + 3

    def draw_footer(self):
        canvas = self.ctx.canvas
        geometry = self.ctx.geometry
        footer_y = geometry.height - self.FOOTER_HEIGHT

        canvas.rect(0, footer_y, geometry.width, self.FOOTER_HEIGHT, fill=BLACK)
        canvas.text(self.ctx.config.SITE_LABEL, geometry.width / 2, footer_y + self.FOOTER_HEIGHT / 2 + 2,
                    size=12, bold=True, color=WHITE, align='center')


class SinglePageRenderer:
    """One large product card per page"""

    IMAGE_SIZE = 140.0
    BADGE_WIDTH = 35.0
    BADGE_HEIGHT = 12.0
    BADGE_GAP = 2.0

    def __init__(self, ctx: RenderContext, chrome: PageChrome):
        self.ctx = ctx
        self.chrome = chrome

    def draw(self, product: Product, category_name: Optional[str] = None):
        ctx = self.ctx
        canvas = ctx.canvas
        geometry = ctx.geometry
        center_x = geometry.width / 2
        text_width = geometry.content_width - 30

        promotion = find_promotion(product.id, ctx.options.promotions)
        tags = ctx.tags_for(product)

        content_top = self.chrome.draw_header(ctx.options.title, category_name)
        card_y = content_top + 5
        card_height = geometry.height - card_y - 30
        canvas.rect(geometry.margin, card_y, geometry.content_width, card_height,
                    fill=WHITE, stroke=(230, 230, 230), line_width=0.5, radius=3)

        image_x = center_x - self.IMAGE_SIZE / 2
        y = card_y + 15
        draw_image(ctx, product.image_url, LayoutPosition(image_x, y, self.IMAGE_SIZE, self.IMAGE_SIZE),
                   background=(248, 249, 250))

        badge_y = y + 5
        image_right = image_x + self.IMAGE_SIZE - 5
        draw_tag_row(ctx, tags, image_right, badge_y, self.BADGE_WIDTH, self.BADGE_HEIGHT,
                     self.BADGE_GAP, font_size=9, radius=2, text_offset=8)

        if promotion and tags:
            discount_y = badge_y + self.BADGE_HEIGHT + 2
            discount_x = image_right - self.BADGE_WIDTH
            canvas.rect(discount_x, discount_y, self.BADGE_WIDTH, 10, fill=GREEN, radius=2)
            canvas.text(discount_label(promotion, ctx.config.CURRENCY_PREFIX),
                        discount_x + self.BADGE_WIDTH / 2, discount_y + 6.5,
                        size=8, bold=True, color=WHITE, align='center')

        y += self.IMAGE_SIZE + 20

        name_lines = canvas.split_text(product.name, text_width, size=16, bold=True)
        for i, line in enumerate(name_lines):
            canvas.text(line, center_x, y + i * 7, size=16, bold=True, color=(30, 30, 30), align='center')
        y += len(name_lines) * 7 + 5

        if product.description.strip():
            desc_lines = canvas.split_text(product.description, text_width, size=10)[:3]
            for i, line in enumerate(desc_lines):
                canvas.text(line, center_x, y + i * 5, size=10, color=GREY_TEXT, align='center')
            y += len(desc_lines) * 5 + 5

        canvas.text(f"Código: {product.code}", center_x, y, size=10, color=GREY_TEXT, align='center')
        y += 6

        if product.category_name:
            chip_width = canvas.text_width(product.category_name, size=10) + 8
            canvas.rect(center_x - chip_width / 2, y - 4, chip_width, 6, fill=(243, 244, 246), radius=1)
            canvas.text(product.category_name, center_x, y, size=8, color=(75, 85, 99), align='center')
            y += 10

        if ctx.options.include_price:
            self._draw_price_block(product, promotion, center_x, y)

        self.chrome.draw_footer()

    def _draw_price_block(self, product: Product, promotion, center_x: float, y: float):
        ctx = self.ctx
        canvas = ctx.canvas
        price_value = product.price_for(ctx.options.price_tier)

        if promotion is None:
            canvas.text(ctx.price(price_value), center_x, y, size=20, bold=True, color=BLUE, align='center')
            return

        old_text = ctx.price(price_value)
        old_width = canvas.text_width(old_text, size=11)
        old_x = center_x - old_width / 2
        canvas.text(old_text, center_x, y, size=11, color=(156, 163, 175), align='center')
        canvas.line(old_x, y - 1, old_x + old_width, y - 1, color=(156, 163, 175), width=0.2, dash=(0.5, 0.5))
        y += 8

        canvas.text(ctx.price(promotion.promotional_price), center_x, y, size=20, bold=True, color=RED,
                    align='center')
        y += 10

        savings = price_value - promotion.promotional_price
        canvas.text(f"Ahorre {ctx.price(savings)}", center_x, y, size=9, bold=True, color=GREEN, align='center')


class GridCardRenderer:
    """Draws the cards planned by ``GridLayoutEngine``"""

    PADDING = 2.0
    BAR_HEIGHT = 4.5
    GROUP_IMAGE_SIZE = 45.0
    MIN_GROUP_IMAGE_SIZE = 15.0
    TABLE_ROW_HEIGHT = 3.5
    TABLE_HEADER_HEIGHT = 4.0

    def __init__(self, ctx: RenderContext):
        self.ctx = ctx

    def draw(self, placement: GridPlacement):
        if placement.is_group:
            self.draw_group_card(placement.group, placement.variations, placement.position)
        else:
            self.draw_product_card(placement.product, placement.position)

    def _frame(self, position: LayoutPosition):
        self.ctx.canvas.rect(position.x, position.y, position.width, position.height,
                             fill=WHITE, stroke=BLACK, line_width=0.8)

    def _bottom_bar(self, position: LayoutPosition) -> float:
        bar_y = position.bottom - self.BAR_HEIGHT
        self.ctx.canvas.rect(position.x, bar_y, position.width, self.BAR_HEIGHT, fill=INK)
        return bar_y

    def draw_product_card(self, product: Product, position: LayoutPosition):
        ctx = self.ctx
        canvas = ctx.canvas
        pad = self.PADDING
        width = position.width
        center_x = position.center_x
        image_size = width - pad * 2

        self._frame(position)
        draw_image(ctx, product.image_url, LayoutPosition(position.x + pad, position.y + pad, image_size, image_size))

        tags = ctx.tags_for(product, compact=True)
        if tags:
            gap = 0.8
            available = width - pad * 2
            tag_width = (available - gap) / 2 if len(tags) == 2 else min(22.0, available)
            draw_tag_row(ctx, tags, position.right - pad, position.y + pad, tag_width, 5.5, gap,
                         font_size=5.5 if len(tags) == 2 else 6.5, radius=1.2, text_offset=3.8)

        text_y = position.y + pad + image_size + 4
        name_lines = canvas.split_text(product.name.upper(), width - 4, size=7, bold=True)
        if name_lines:
            canvas.text(name_lines[0], center_x, text_y, size=7, bold=True, color=INK, align='center')
            text_y += 3.2

        if product.description.strip():
            for line in canvas.split_text(product.description, width - 4, size=5)[:2]:
                canvas.text(line, center_x, text_y, size=5, color=GREY_TEXT, align='center')
                text_y += 2.8
            text_y += 0.5

        if product.package_quantity:
            quantity_lines = canvas.split_text(product.package_quantity, width - 4, size=5.5)
            if quantity_lines:
                canvas.text(quantity_lines[0], center_x, text_y, size=5.5, color=(135, 135, 135), align='center')

        bar_y = position.bottom - self.BAR_HEIGHT
        if ctx.options.include_price:
            self._draw_price_box(product, position, bar_y)

        self._bottom_bar(position)
        canvas.text(f"Cód.: {product.code}", center_x, bar_y + 3, size=5, color=(218, 218, 218), align='center')

    def _draw_price_box(self, product: Product, position: LayoutPosition, bar_y: float):
        ctx = self.ctx
        canvas = ctx.canvas
        box_padding = 2
        box_height = 7
        box_y = bar_y - box_height - 1
        price_value = product.price_for(ctx.options.price_tier)
        promotion = find_promotion(product.id, ctx.options.promotions)

        canvas.rect(position.x + box_padding, box_y, position.width - box_padding * 2, box_height,
                    fill=YELLOW, radius=3)

        if promotion is not None:
            old_text = ctx.price(price_value)
            old_width = canvas.text_width(old_text, size=5)
            old_x = position.center_x - old_width / 2
            canvas.text(old_text, position.center_x, box_y - 1, size=5, color=(156, 163, 175), align='center')
            canvas.line(old_x, box_y - 1.6, old_x + old_width, box_y - 1.6, color=(156, 163, 175), width=0.15)
            price_value = promotion.promotional_price

        canvas.text(ctx.price(price_value), position.center_x, box_y + 5, size=9, bold=True, color=INK,
                    align='center')

    def draw_group_card(self, group: ProductGroup, variations: List[Product], position: LayoutPosition):
        ctx = self.ctx
        canvas = ctx.canvas
        pad = self.PADDING
        width = position.width
        variations = variations or group.variations

        self._frame(position)

        bar_y = position.bottom - self.BAR_HEIGHT
        table_x = position.x + pad
        table_width = width - pad * 2
        image_x = position.x + pad
        image_y = position.y + pad

        # Shrink the photo before dropping table rows
        max_rows = int((bar_y - image_y - self.MIN_GROUP_IMAGE_SIZE - 1 - self.TABLE_HEADER_HEIGHT)
                       // self.TABLE_ROW_HEIGHT)
        shown = variations if len(variations) <= max_rows else variations[:max_rows - 1]
        hidden = len(variations) - len(shown)
        row_count = len(shown) + (1 if hidden else 0)
        table_height = self.TABLE_HEADER_HEIGHT + row_count * self.TABLE_ROW_HEIGHT
        table_y = bar_y - table_height
        image_size = min(self.GROUP_IMAGE_SIZE, table_y - image_y - 1)

        display_url = next((v.image_url for v in variations if v.image_url), group.main_product.image_url)
        draw_image(ctx, display_url, LayoutPosition(image_x, image_y, image_size, image_size))

        tags = tags_for_group(group, ctx.options.promotions, ctx.options.best_sellers, now=ctx.now,
                              new_days=ctx.config.NEW_PRODUCT_DAYS, variations=variations)
        draw_tag_row(ctx, tags, position.right - pad, position.y + pad, 23, 6, 1, font_size=7,
                     radius=1.5, text_offset=4, font_sizes={TagKind.PROMOTION: 6.5})

        column_x = image_x + image_size + 3
        column_width = width - image_size - pad * 2 - 3
        text_y = image_y + image_size / 2

        name_lines = canvas.split_text(group.name.upper(), column_width, size=7, bold=True)
        canvas.text(name_lines[0] if name_lines else group.name, column_x, text_y, size=7, bold=True, color=INK)
        text_y += 4

        description = group.main_product.description
        if description.strip():
            desc_lines = canvas.split_text(description, column_width, size=5)
            canvas.text(desc_lines[0] if desc_lines else '', column_x, text_y, size=5, color=GREY_TEXT)

        self._draw_variation_table(shown, hidden, table_x, table_y, table_width)
        self._bottom_bar(position)

    def _draw_variation_table(self, variations: List[Product], hidden: int, x: float, y: float, width: float):
        ctx = self.ctx
        canvas = ctx.canvas
        col_widths = [width * 0.25, width * 0.50, width * 0.25]
        price_x = x + col_widths[0] + col_widths[1]
        price_center = price_x + col_widths[2] / 2
        row_height = self.TABLE_ROW_HEIGHT

        canvas.rect(x, y, width, self.TABLE_HEADER_HEIGHT, fill=(240, 240, 240))
        canvas.text('Código', x + 1, y + 2.8, size=4, bold=True, color=INK)
        canvas.text('Descrição', x + col_widths[0] + 1, y + 2.8, size=4, bold=True, color=INK)
        canvas.text('Valor', price_center, y + 2.8, size=4, bold=True, color=INK, align='center')
        canvas.line(x, y + self.TABLE_HEADER_HEIGHT, x + width, y + self.TABLE_HEADER_HEIGHT)

        row_y = y + self.TABLE_HEADER_HEIGHT
        for variation in variations:
            promotion = find_promotion(variation.id, ctx.options.promotions)

            if ctx.options.include_price:
                canvas.rect(price_x, row_y, col_widths[2], row_height, fill=YELLOW)
            canvas.line(x, row_y + row_height, x + width, row_y + row_height)

            code_lines = canvas.split_text(variation.code, col_widths[0] - 2, size=4)
            canvas.text(code_lines[0] if code_lines else variation.code, x + 1, row_y + 2.5, size=4,
                        color=(50, 50, 50))

            description = variation.description or ''
            if variation.info:
                description = f"{description} - {variation.info}" if description else variation.info
            description = description or '-'
            desc_lines = canvas.split_text(description, col_widths[1] - 2, size=4)
            canvas.text(desc_lines[0] if desc_lines else description, x + col_widths[0] + 1, row_y + 2.5,
                        size=4, color=(50, 50, 50))

            if ctx.options.include_price:
                if promotion is not None:
                    canvas.text(ctx.price(promotion.promotional_price), price_center, row_y + 2.5, size=4,
                                bold=True, color=RED, align='center')
                else:
                    canvas.text(ctx.price(variation.price_for(ctx.options.price_tier)), price_center,
                                row_y + 2.5, size=4, bold=True, color=INK, align='center')
            row_y += row_height

        if hidden:
            canvas.text(f"+ {hidden} variações", x + col_widths[0] + 1, row_y + 2.5, size=4, color=GREY_TEXT)
