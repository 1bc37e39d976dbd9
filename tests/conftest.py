"""
Pytest configuration and fixtures for the catalog PDF generator tests.

Provides shared fixtures, test configuration, and utilities
for running tests across the entire application.
"""

import base64
import io
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
from PIL import Image

from catalog import create_app
from catalog.config import AppConfig
from catalog.images import ImagePayload, ImageResolver
from catalog.models import (
    BestSeller, Category, DiscountType, LayoutMode, PriceTier, Product, Promotion, RenderOptions
)

NOW = datetime(2025, 6, 22, 12, 0, tzinfo=timezone.utc)
OLD_DATE = datetime(2025, 1, 10, 9, 0, tzinfo=timezone.utc)


class FakeImageResolver(ImageResolver):
    """Serves generated images for known URLs; every other URL counts as a failure."""

    def __init__(self, config, images=None):
        super().__init__(config, session=Mock())
        self.images = images or {}
        self.requested = []

    def fetch(self, url):
        if not url:
            return None
        self.requested.append(url)
        image = self.images.get(url)
        if image is None:
            self.failures += 1
            return None
        return ImagePayload(image=image, format='PNG')


def make_png_bytes(size=(60, 40), color=(200, 30, 30), mode='RGB') -> bytes:
    """Encode a solid-colour image as PNG bytes"""
    buffer = io.BytesIO()
    Image.new(mode, size, color).save(buffer, format='PNG')
    return buffer.getvalue()


def make_data_url(size=(60, 40)) -> str:
    return 'data:image/png;base64,' + base64.b64encode(make_png_bytes(size)).decode('ascii')


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def test_config(tmp_path):
    """Configuration without a logo or proxy, writing into a temp directory."""
    return AppConfig(
        SECRET_KEY='test-key',
        FLASK_ENV='testing',
        DEBUG=False,
        OUTPUT_FOLDER=str(tmp_path / 'output'),
        LOG_FILE=str(tmp_path / 'logs' / 'test.log'),
        LOGO_URL=None,
    )


@pytest.fixture
def fake_resolver(test_config):
    return FakeImageResolver(test_config)


@pytest.fixture
def make_product():
    """Factory for products with sensible defaults."""
    def _make(product_id, name=None, category=None, category_id=None, created_at=OLD_DATE,
              price=10000.0, **kwargs):
        return Product(
            id=product_id,
            code=kwargs.pop('code', f"C-{product_id}"),
            name=name or f"Produto {product_id}",
            created_at=created_at,
            price=price,
            category_id=category_id,
            category=Category(category_id, category) if category else None,
            **kwargs
        )
    return _make


@pytest.fixture
def make_options():
    """Factory for render options."""
    def _make(layout=LayoutMode.GRID, include_price=True, title='Catalogo Teste', promotions=(),
              best_sellers=(), price_tier=PriceTier.RETAIL):
        return RenderOptions(
            layout=layout,
            include_price=include_price,
            title=title,
            price_tier=price_tier,
            promotions=tuple(promotions),
            best_sellers=tuple(best_sellers),
        )
    return _make


@pytest.fixture
def sample_rows():
    """Product rows as the backend sends them."""
    return [
        {
            'id': 'p1',
            'codigo': '1001',
            'nome': 'Sabonete Natural',
            'description': 'Sabonete de glicerina',
            'info': '90g',
            'quantidade': 'Caixa com 12',
            'codigo_barra': '7890000000011',
            'price': 15000,
            'price_atacado': '12000',
            'price_interior': 13000,
            'price_mayorista': 11000,
            'price_super_mayorista': 10000,
            'stock': 40,
            'image_url': None,
            'category_id': 'cat-1',
            'categories': {'id': 'cat-1', 'name': 'Higiene'},
            'created_at': '2025-01-10T09:00:00Z',
        },
        {
            'id': 'p2',
            'codigo': '2001',
            'nome': 'Detergente',
            'price': 8000,
            'created_at': '2025-02-01T10:00:00+00:00',
        },
    ]


@pytest.fixture
def sample_promotion():
    return Promotion(product_id='p1', promotional_price=10000, discount_value=5000,
                     discount_type=DiscountType.FIXED)


@pytest.fixture
def sample_best_seller():
    return BestSeller(product_id='p1')


@pytest.fixture(scope='session')
def app(tmp_path_factory):
    """Create and configure a test Flask application."""
    base = tmp_path_factory.mktemp('app')
    app = create_app('testing', overrides={
        'SECRET_KEY': 'test-key',
        'OUTPUT_FOLDER': str(base / 'output'),
        'LOG_FILE': str(base / 'logs' / 'test.log'),
        'LOGO_URL': None,
        'IMAGE_PROXY_URL': None,
    })
    app.config['TESTING'] = True
    app.extensions['catalog_resolver'] = FakeImageResolver(app.extensions['catalog_config'])

    yield app


@pytest.fixture
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()
