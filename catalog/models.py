"""
Domain records for catalog generation.

Products, promotions and best sellers arrive as backend rows (dicts); the
``from_dict`` constructors turn them into typed records. Groups and
category buckets are derived views rebuilt on every generation run.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import InvalidProductDataError, InvalidRenderOptionsError, ValidationError
from .utils import parse_timestamp, to_bool, to_float


class PriceTier(str, Enum):
    """Price list a catalog is printed with"""
    RETAIL = 'price'
    WHOLESALE = 'price_atacado'
    INTERIOR = 'price_interior'
    MAYORISTA = 'price_mayorista'
    SUPER_MAYORISTA = 'price_super_mayorista'


class LayoutMode(str, Enum):
    SINGLE = 'single'
    GRID = 'grid'


class DiscountType(str, Enum):
    FIXED = 'fixed'
    PERCENTAGE = 'percentage'


def _parse_enum(enum_cls, value: Any, field_name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidRenderOptionsError(field_name, value, [e.value for e in enum_cls])


def _parse_flag(value: Any, field_name: str, default: bool = True) -> bool:
    try:
        return to_bool(value, default=default)
    except ValueError:
        raise InvalidRenderOptionsError(field_name, value, ['true', 'false'])


@dataclass
class Category:
    id: Optional[str]
    name: str

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional['Category']:
        if not data or not data.get('name'):
            return None
        return cls(id=data.get('id'), name=data['name'])


@dataclass
class Product:
    """A product row as read from the backend (read-only here)"""
    id: str
    code: str
    name: str
    created_at: datetime
    description: str = ''
    info: str = ''
    package_quantity: str = ''
    barcode: str = ''
    price: float = 0.0
    price_atacado: float = 0.0
    price_interior: float = 0.0
    price_mayorista: float = 0.0
    price_super_mayorista: float = 0.0
    stock: int = 0
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    category: Optional[Category] = None

    @property
    def category_name(self) -> Optional[str]:
        return self.category.name if self.category else None

    @property
    def normalized_name(self) -> str:
        return self.name.strip().lower()

    def price_for(self, tier: PriceTier) -> float:
        return _PRICE_GETTERS[tier](self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Product':
        """Build a product from a backend row (Portuguese column names)"""
        product_id = data.get('id')
        if not product_id:
            raise InvalidProductDataError(product_id, "missing id")
        if data.get('nome') is None:
            raise InvalidProductDataError(product_id, "missing name")

        try:
            created_at = parse_timestamp(data.get('created_at'))
        except ValueError as e:
            raise InvalidProductDataError(product_id, f"bad created_at: {e}")
        if created_at is None:
            raise InvalidProductDataError(product_id, "missing created_at")

        try:
            prices = {tier.value: to_float(data.get(tier.value)) for tier in PriceTier}
            stock = int(to_float(data.get('stock')))
        except ValueError as e:
            raise InvalidProductDataError(product_id, str(e))

        return cls(
            id=str(product_id),
            code=str(data.get('codigo') or ''),
            name=str(data['nome']),
            created_at=created_at,
            description=data.get('description') or '',
            info=data.get('info') or '',
            package_quantity=data.get('quantidade') or '',
            barcode=data.get('codigo_barra') or '',
            stock=stock,
            image_url=data.get('image_url') or None,
            category_id=str(data['category_id']) if data.get('category_id') is not None else None,
            category=Category.from_dict(data.get('categories')),
            **prices
        )


_PRICE_GETTERS: Dict[PriceTier, Callable[[Product], float]] = {
    PriceTier.RETAIL: lambda p: p.price,
    PriceTier.WHOLESALE: lambda p: p.price_atacado,
    PriceTier.INTERIOR: lambda p: p.price_interior,
    PriceTier.MAYORISTA: lambda p: p.price_mayorista,
    PriceTier.SUPER_MAYORISTA: lambda p: p.price_super_mayorista,
}


@dataclass(frozen=True)
class Promotion:
    product_id: str
    promotional_price: float
    discount_value: float
    discount_type: DiscountType
    active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Promotion':
        try:
            return cls(
                product_id=str(data['product_id']),
                promotional_price=to_float(data.get('promotional_price')),
                discount_value=to_float(data.get('discount_value')),
                discount_type=_parse_enum(DiscountType, data.get('discount_type', 'fixed'), 'discount_type'),
                active=to_bool(data.get('active'), default=True),
            )
        except (KeyError, ValueError) as e:
            raise ValidationError(f"Invalid promotion record: {e}", details={'record': data})


@dataclass(frozen=True)
class BestSeller:
    product_id: str
    active: bool = True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BestSeller':
        if 'product_id' not in data:
            raise ValidationError("Invalid best seller record: missing product_id", details={'record': data})
        return cls(product_id=str(data['product_id']), active=_parse_flag(data.get('active'), 'active'))


@dataclass(frozen=True)
class RenderOptions:
    """Caller-supplied options, fixed for one generation run"""
    layout: LayoutMode
    include_price: bool
    title: str
    price_tier: PriceTier = PriceTier.RETAIL
    promotions: Tuple[Promotion, ...] = ()
    best_sellers: Tuple[BestSeller, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RenderOptions':
        """Accepts both the UI spelling (includePrice, priceType, bestSellers) and snake_case"""
        title = data.get('title')
        if not title or not str(title).strip():
            raise ValidationError("Catalog title is required", suggestions=["Provide a non-empty title"])

        include_price = data.get('include_price', data.get('includePrice', True))
        tier = data.get('price_tier', data.get('priceType')) or PriceTier.RETAIL.value
        promotions = data.get('promotions') or []
        best_sellers = data.get('best_sellers', data.get('bestSellers')) or []

        return cls(
            layout=_parse_enum(LayoutMode, data.get('layout', 'grid'), 'layout'),
            include_price=_parse_flag(include_price, 'include_price'),
            title=str(title),
            price_tier=_parse_enum(PriceTier, tier, 'price_tier'),
            promotions=tuple(p if isinstance(p, Promotion) else Promotion.from_dict(p) for p in promotions),
            best_sellers=tuple(b if isinstance(b, BestSeller) else BestSeller.from_dict(b) for b in best_sellers),
        )


@dataclass
class ProductGroup:
    """Products sharing a normalized name; the earliest-created one represents the group"""
    key: str
    main_product: Product
    variations: List[Product] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.main_product.id

    @property
    def name(self) -> str:
        return self.main_product.name

    @property
    def is_variation_group(self) -> bool:
        return len(self.variations) > 1


@dataclass
class CategoryBucket:
    category_name: str
    products: List[Product] = field(default_factory=list)


def products_from_dicts(rows: List[Dict[str, Any]]) -> List[Product]:
    return [row if isinstance(row, Product) else Product.from_dict(row) for row in rows]
