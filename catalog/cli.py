"""
Command line entry point for the catalog PDF generator.

Reads backend exports (JSON arrays of rows) and writes the catalog PDF.

Example:
    python -m catalog products.json --layout grid --title "Catálogo 2025" \
        --promotions promotions.json --best-sellers best_sellers.json --output-dir output
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .best_sellers import resolve_best_sellers
from .config import load_config
from .document import CatalogGenerator
from .errors import CatalogError, ValidationError
from .grouping import filter_by_category
from .models import BestSeller, LayoutMode, PriceTier, Promotion, RenderOptions, products_from_dicts


DEFAULT_TITLE = 'Catálogo de Produtos'


def catalog_title(products, category_id: Optional[str] = None) -> str:
    """Per-category catalogs are titled after their category"""
    if category_id:
        name = next((p.category_name for p in products if p.category_name), None)
        if name:
            return f"Catálogo - {name}"
    return DEFAULT_TITLE


def read_json_rows(path: Optional[str]) -> List[dict]:
    """Load a JSON array of rows; a missing path means no rows"""
    if not path:
        return []
    try:
        with open(path, 'r', encoding='utf-8') as f:
            rows = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ValidationError(f"Cannot read {path}: {e}", details={'path': path})
    if not isinstance(rows, list):
        raise ValidationError(f"{path} must contain a JSON array", details={'path': path})
    return rows


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='catalog-pdf', description='Generate a product catalog PDF')
    parser.add_argument('products', help='JSON file with product rows')
    parser.add_argument('--layout', choices=[m.value for m in LayoutMode], default=LayoutMode.GRID.value)
    parser.add_argument('--title', help=f"Catalog title (default: '{DEFAULT_TITLE}',"
                                         " or 'Catálogo - <category>' with --category)")
    parser.add_argument('--price-tier', choices=[t.value for t in PriceTier], default=PriceTier.RETAIL.value)
    parser.add_argument('--no-price', action='store_true', help='Leave prices out of the catalog')
    parser.add_argument('--promotions', help='JSON file with promotion rows')
    parser.add_argument('--best-sellers', help='JSON file with manual best seller rows')
    parser.add_argument('--sale-items', help='JSON file with sale items, to compute the top sellers')
    parser.add_argument('--category', help='Only include products of this category id')
    parser.add_argument('--output-dir', help='Directory for the PDF (default: OUTPUT_FOLDER)')
    parser.add_argument('--env', default='development', help='Configuration environment')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.env)
        products = products_from_dicts(read_json_rows(args.products))
        if args.category:
            products = filter_by_category(products, args.category)

        manual = [BestSeller.from_dict(row) for row in read_json_rows(args.best_sellers)]
        sale_items = read_json_rows(args.sale_items)
        best_sellers = resolve_best_sellers(manual, sale_items) if sale_items else manual

        options = RenderOptions(
            layout=LayoutMode(args.layout),
            include_price=not args.no_price,
            title=args.title or catalog_title(products, args.category),
            price_tier=PriceTier(args.price_tier),
            promotions=tuple(Promotion.from_dict(row) for row in read_json_rows(args.promotions)),
            best_sellers=tuple(best_sellers),
        )

        catalog = CatalogGenerator(config=config).generate(products, options)
        path = catalog.save(args.output_dir or config.OUTPUT_FOLDER)
    except CatalogError as e:
        logger.error(f"Catalog generation failed: {e}")
        for suggestion in e.suggestions:
            logger.info(f"  - {suggestion}")
        return 1

    print(f"{path} ({catalog.page_count} pages)")
    if catalog.missing_images:
        print(f"{catalog.missing_images} product images replaced by the placeholder")
    return 0


if __name__ == '__main__':
    sys.exit(main())
