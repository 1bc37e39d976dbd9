"""
Catalog document assembly.

Orchestrates a generation run: derives groups and category buckets, walks
categories in first-seen order, creates pages for the selected layout mode,
sets the document metadata and emits the finished PDF.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from loguru import logger

from .canvas import CatalogCanvas, PageRecord
from .config import AppConfig, get_config
from .errors import EmptyCatalogError
from .grouping import GroupIndex, group_products, partition_by_category
from .images import ImageResolver
from .layout import GridGeometry, GridLayoutEngine
from .models import LayoutMode, Product, RenderOptions
from .render import GridCardRenderer, PageChrome, RenderContext, SinglePageRenderer
from .utils import slugify_title


@dataclass
class GeneratedCatalog:
    """A finished catalog PDF held in memory"""
    filename: str
    data: bytes
    pages: List[PageRecord]
    title: str
    missing_images: int = 0

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def save(self, directory) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.data)
        logger.info(f"Catalog saved: {path} ({self.page_count} pages)")
        return path


class CatalogGenerator:
    """Builds catalog PDFs from product lists"""

    def __init__(self, config: Optional[AppConfig] = None, resolver: Optional[ImageResolver] = None):
        self.config = config or get_config()
        self.resolver = resolver or ImageResolver(self.config)

    def generate(self, products: Sequence[Product], options: RenderOptions,
                 now: Optional[datetime] = None) -> GeneratedCatalog:
        """
        Render ``products`` with ``options``.

        Any error raised while laying out or drawing propagates; nothing is
        written for a failed run.
        """
        products = list(products)
        if not products:
            raise EmptyCatalogError(options.title)

        logger.info(f"Generating '{options.title}' catalog: {len(products)} products, "
                    f"{options.layout.value} layout")

        failures_before = self.resolver.failures
        canvas = CatalogCanvas()
        ctx = RenderContext(
            canvas=canvas,
            options=options,
            config=self.config,
            resolver=self.resolver,
            now=now or datetime.now(timezone.utc)
        )
        chrome = PageChrome(ctx)

        group_index = GroupIndex(group_products(products))
        buckets = partition_by_category(products, self.config.NO_CATEGORY_LABEL)

        if options.layout == LayoutMode.SINGLE:
            self._render_single(ctx, chrome, buckets)
        else:
            self._render_grid(ctx, chrome, buckets, group_index)

        canvas.set_metadata(
            title=options.title,
            subject=self.config.PDF_SUBJECT,
            author=self.config.PDF_AUTHOR,
            keywords=self.config.PDF_KEYWORDS,
            creator=self.config.PDF_CREATOR
        )
        data = canvas.finish()

        missing = self.resolver.failures - failures_before
        if missing:
            logger.warning(f"{missing} images replaced by the placeholder")
        logger.info(f"Catalog '{options.title}' generated: {canvas.page_count} pages")

        return GeneratedCatalog(
            filename=slugify_title(options.title),
            data=data,
            pages=canvas.pages,
            title=options.title,
            missing_images=missing
        )

    def _render_single(self, ctx: RenderContext, chrome: PageChrome, buckets):
        renderer = SinglePageRenderer(ctx, chrome)
        page_number = 1

        for bucket in buckets:
            for product in bucket.products:
                if page_number > 1:
                    ctx.canvas.new_page()
                renderer.draw(product, bucket.category_name)
                page_number += 1

    def _render_grid(self, ctx: RenderContext, chrome: PageChrome, buckets, group_index: GroupIndex):
        engine = GridLayoutEngine(group_index, GridGeometry(page=ctx.geometry))
        cards = GridCardRenderer(ctx)
        page_number = 1

        for bucket in buckets:
            pending = list(bucket.products)

            while pending:
                if page_number > 1:
                    ctx.canvas.new_page()

                start_y = chrome.draw_header(ctx.options.title, bucket.category_name)
                result = engine.plan_page(pending, start_y)
                for placement in result.placements:
                    cards.draw(placement)
                chrome.draw_footer()

                logger.debug(f"Page {page_number} ({bucket.category_name}): {result.consumed} products")
                pending = result.remaining
                page_number += 1


def generate_catalog_pdf(products: Sequence[Product], options: RenderOptions, output_dir=None,
                         config: Optional[AppConfig] = None,
                         resolver: Optional[ImageResolver] = None) -> Path:
    """Generate a catalog and write it to ``output_dir`` (default: OUTPUT_FOLDER)"""
    generator = CatalogGenerator(config=config, resolver=resolver)
    catalog = generator.generate(products, options)
    return catalog.save(output_dir or generator.config.OUTPUT_FOLDER)
