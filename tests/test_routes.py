"""
Integration tests for the Flask routes.
"""

import pytest


@pytest.fixture
def payload(sample_rows):
    return {
        'products': sample_rows,
        'options': {'layout': 'grid', 'includePrice': True, 'title': 'Catálogo Geral'},
    }


class TestHealth:

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'
        assert response.get_json()['image_proxy'] is False


class TestCreateCatalog:

    def test_returns_pdf_attachment(self, client, payload):
        response = client.post('/api/catalog', json=payload)

        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF')
        disposition = response.headers['Content-Disposition']
        assert disposition.startswith('attachment')
        assert 'Cat%C3%A1logo_Geral.pdf' in disposition or 'Catalogo_Geral.pdf' in disposition

    def test_single_layout_with_promotions(self, client, payload):
        payload['options'].update({
            'layout': 'single',
            'priceType': 'price_atacado',
            'promotions': [{'product_id': 'p1', 'promotional_price': 9000, 'discount_value': 10,
                            'discount_type': 'percentage'}],
        })

        response = client.post('/api/catalog', json=payload)

        assert response.status_code == 200
        assert response.data.startswith(b'%PDF')

    def test_best_sellers_from_sale_items(self, client, payload):
        payload['sale_items'] = [
            {'product_id': 'p2', 'quantity': 5, 'sales': {'payment_status': 'paid'}},
            {'product_id': 'p1', 'quantity': 9, 'sales': {'payment_status': 'cancelled'}},
        ]
        payload['options']['bestSellers'] = [{'product_id': 'p1'}]

        response = client.post('/api/catalog', json=payload)

        assert response.status_code == 200

    def test_category_filter(self, client, payload):
        payload['category_id'] = 'cat-1'

        response = client.post('/api/catalog', json=payload)

        assert response.status_code == 200

    def test_empty_products(self, client, payload):
        payload['products'] = []

        response = client.post('/api/catalog', json=payload)

        assert response.status_code == 400
        body = response.get_json()
        assert body['error_type'] == 'EmptyCatalogError'
        assert body['suggestions']

    def test_category_filter_leaving_nothing(self, client, payload):
        payload['category_id'] = 'does-not-exist'

        response = client.post('/api/catalog', json=payload)

        assert response.status_code == 400
        assert response.get_json()['error_type'] == 'EmptyCatalogError'

    def test_missing_options(self, client, sample_rows):
        response = client.post('/api/catalog', json={'products': sample_rows})

        assert response.status_code == 400
        assert response.get_json()['error_type'] == 'ValidationError'

    def test_invalid_layout(self, client, payload):
        payload['options']['layout'] = 'list'

        response = client.post('/api/catalog', json=payload)

        assert response.status_code == 400
        assert response.get_json()['error_type'] == 'InvalidRenderOptionsError'

    def test_invalid_product_row(self, client, payload):
        payload['products'] = [{'id': 'p1', 'nome': 'Sem data'}]

        response = client.post('/api/catalog', json=payload)

        assert response.status_code == 400
        assert response.get_json()['error_type'] == 'InvalidProductDataError'

    def test_body_must_be_json_object(self, client):
        response = client.post('/api/catalog', data='nope', content_type='text/plain')

        assert response.status_code == 400
