"""
Unit tests for badge composition (promotion, best seller and new tags).
"""

from datetime import datetime, timezone

import pytest

from catalog.badges import (
    TagKind, compose_tags, discount_label, find_promotion, is_best_seller, is_new_product,
    tags_for_group, tags_for_product
)
from catalog.grouping import group_products
from catalog.models import BestSeller, DiscountType, Promotion

NOW = datetime(2025, 6, 22, 12, 0, tzinfo=timezone.utc)


class TestIsNewProduct:

    def test_created_exactly_21_days_ago_is_new(self):
        assert is_new_product(datetime(2025, 6, 1, 23, 0, tzinfo=timezone.utc), NOW)

    def test_created_22_days_ago_is_not_new(self):
        assert not is_new_product(datetime(2025, 5, 31, 8, 0, tzinfo=timezone.utc), NOW)

    def test_created_today(self):
        assert is_new_product(NOW, NOW)

    def test_custom_window(self):
        created = datetime(2025, 6, 10, tzinfo=timezone.utc)

        assert not is_new_product(created, NOW, days=7)
        assert is_new_product(created, NOW, days=14)

    def test_naive_datetimes(self):
        assert is_new_product(datetime(2025, 6, 20), datetime(2025, 6, 22))


class TestComposeTags:

    def test_priority_and_cap(self):
        tags = compose_tags(True, True, True)

        assert [t.kind for t in tags] == [TagKind.PROMOTION, TagKind.BEST_SELLER]

    def test_promotion_and_new(self):
        assert [t.kind for t in compose_tags(True, False, True)] == [TagKind.PROMOTION, TagKind.NEW]

    def test_best_seller_and_new(self):
        assert [t.kind for t in compose_tags(False, True, True)] == [TagKind.BEST_SELLER, TagKind.NEW]

    def test_no_tags(self):
        assert compose_tags(False, False, False) == []

    def test_labels_and_colors(self):
        full = compose_tags(True, True, False)
        compact = compose_tags(True, True, False, compact=True)

        assert [t.label for t in full] == ['PROMOCIÓN', 'MÁS VENDIDO']
        assert [t.label for t in compact] == ['PROMO', 'TOP']
        assert full[0].color == (239, 68, 68)
        assert full[1].color == (34, 197, 94)
        assert compose_tags(False, False, True)[0].color == (37, 99, 235)


class TestLookups:

    def test_inactive_promotion_is_ignored(self):
        promotions = [
            Promotion('p1', 9000, 1000, DiscountType.FIXED, active=False),
            Promotion('p1', 8000, 2000, DiscountType.FIXED),
        ]

        assert find_promotion('p1', promotions).promotional_price == 8000
        assert find_promotion('p2', promotions) is None

    def test_inactive_best_seller_is_ignored(self):
        assert not is_best_seller('p1', [BestSeller('p1', active=False)])
        assert is_best_seller('p1', [BestSeller('p1')])


class TestProductAndGroupTags:

    def test_tags_for_product(self, make_product, sample_promotion, sample_best_seller):
        product = make_product('p1', created_at=datetime(2025, 6, 20, tzinfo=timezone.utc))

        tags = tags_for_product(product, [sample_promotion], [sample_best_seller], now=NOW)

        assert [t.kind for t in tags] == [TagKind.PROMOTION, TagKind.BEST_SELLER]

    def test_old_product_without_entries(self, make_product):
        assert tags_for_product(make_product('p1'), [], [], now=NOW) == []

    def test_group_tag_applies_when_any_variation_qualifies(self, make_product):
        products = [
            make_product('a1', name='Vela'),
            make_product('a2', name='Vela', created_at=datetime(2025, 6, 15, tzinfo=timezone.utc)),
        ]
        group = group_products(products)[0]
        promotions = [Promotion('a1', 9000, 1000, DiscountType.FIXED)]

        tags = tags_for_group(group, promotions, [], now=NOW)

        assert [t.kind for t in tags] == [TagKind.PROMOTION, TagKind.NEW]

    def test_group_tags_limited_to_given_variations(self, make_product):
        products = [make_product('a1', name='Vela'), make_product('a2', name='Vela')]
        group = group_products(products)[0]

        tags = tags_for_group(group, [], [BestSeller('a2')], now=NOW, variations=[products[0]])

        assert tags == []


class TestDiscountLabel:

    @pytest.mark.parametrize('discount_type, value, expected', [
        (DiscountType.PERCENTAGE, 10, '-10%'),
        (DiscountType.PERCENTAGE, 12.5, '-12.5%'),
        (DiscountType.FIXED, 5000, '-Gs. 5.000'),
    ])
    def test_labels(self, discount_type, value, expected):
        promotion = Promotion('p1', 0, value, discount_type)

        assert discount_label(promotion) == expected
