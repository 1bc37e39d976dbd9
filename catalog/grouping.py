"""
Product grouping for catalog generation.

Groups products by normalized name (variation groups) and partitions them
into category buckets. Both are recomputed from the caller's list on every
run.
"""

from typing import Dict, Iterable, List, Optional

from loguru import logger

from .models import CategoryBucket, Product, ProductGroup


def group_products(products: Iterable[Product]) -> List[ProductGroup]:
    """
    Collapse products sharing a trimmed, lowercased name into groups.

    Groups come out in first-occurrence order; members are sorted by
    creation time (stable, so ties keep input order).
    """
    members_by_key: Dict[str, List[Product]] = {}
    for product in products:
        members_by_key.setdefault(product.normalized_name, []).append(product)

    groups = []
    for key, members in members_by_key.items():
        ordered = sorted(members, key=lambda p: p.created_at)
        groups.append(ProductGroup(key=key, main_product=ordered[0], variations=ordered))

    variation_groups = sum(1 for g in groups if g.is_variation_group)
    logger.debug(f"Grouped products into {len(groups)} groups ({variation_groups} with variations)")
    return groups


def partition_by_category(products: Iterable[Product], no_category_label: str = "Sem Categoria") -> List[CategoryBucket]:
    """Bucket products by category name, keeping first-seen category order and input order inside"""
    buckets: Dict[str, CategoryBucket] = {}
    for product in products:
        name = product.category_name or no_category_label
        if name not in buckets:
            buckets[name] = CategoryBucket(category_name=name)
        buckets[name].products.append(product)
    return list(buckets.values())


def filter_by_category(products: Iterable[Product], category_id: str) -> List[Product]:
    """Products of one category, for per-category catalogs"""
    return [p for p in products if p.category_id == category_id]


class GroupIndex:
    """Lookup from product id to the group it belongs to"""

    def __init__(self, groups: Iterable[ProductGroup]):
        self.groups = list(groups)
        self._by_product_id: Dict[str, ProductGroup] = {}
        for group in self.groups:
            for variation in group.variations:
                self._by_product_id[variation.id] = group

    def group_of(self, product: Product) -> Optional[ProductGroup]:
        return self._by_product_id.get(product.id)

    def is_in_variation_group(self, product: Product) -> bool:
        group = self.group_of(product)
        return bool(group and group.is_variation_group)

    def __len__(self) -> int:
        return len(self.groups)
