"""
Flask routes for the catalog PDF generator
Accepts product lists as JSON and returns the catalog as a PDF download
"""

import io
import uuid

from flask import Blueprint, current_app, jsonify, request, send_file
from loguru import logger

from .best_sellers import resolve_best_sellers
from .document import CatalogGenerator
from .errors import (
    CatalogError, ValidationError, ProcessingError, create_error_recovery_suggestions
)
from .grouping import filter_by_category
from .models import RenderOptions, products_from_dicts


bp = Blueprint('main', __name__)


@bp.route('/health', methods=['GET'])
def health():
    """Liveness probe"""
    config = current_app.extensions['catalog_config']
    return jsonify({
        'status': 'ok',
        'environment': config.FLASK_ENV,
        'image_proxy': bool(config.IMAGE_PROXY_URL)
    })


@bp.route('/api/catalog', methods=['POST'])
def create_catalog():
    """Generate a catalog PDF from a JSON body and return it as an attachment"""
    request_id = str(uuid.uuid4())

    try:
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("Request body must be a JSON object",
                                  suggestions=["Send {'products': [...], 'options': {...}}"])

        options = parse_render_options(payload)
        products = products_from_dicts(payload.get('products') or [])

        category_id = payload.get('category_id')
        if category_id:
            products = filter_by_category(products, str(category_id))

        logger.info(f"Request {request_id}: catalog '{options.title}' with {len(products)} products")

        generator = build_generator()
        catalog = generator.generate(products, options)

        return send_file(
            io.BytesIO(catalog.data),
            mimetype='application/pdf',
            as_attachment=True,
            download_name=catalog.filename
        )

    except ValidationError as e:
        logger.warning(f"Validation error in request {request_id}: {e}")
        return jsonify(e.to_dict()), 400

    except ProcessingError as e:
        logger.error(f"Processing error in request {request_id}: {e}")
        return jsonify(e.to_dict()), 500

    except Exception as e:
        logger.exception(f"Unexpected error in request {request_id}: {e}")
        error = CatalogError(
            "Catalog generation failed",
            details={'error_type': type(e).__name__, 'request_id': request_id},
            suggestions=create_error_recovery_suggestions(e)
        )
        return jsonify(error.to_dict()), 500


def parse_render_options(payload: dict) -> RenderOptions:
    """Read render options, resolving best sellers from sale items when they are sent"""
    if not isinstance(payload.get('options'), dict):
        raise ValidationError("Missing 'options' object", suggestions=["Provide layout, title and includePrice"])
    options_data = dict(payload['options'])

    sale_items = payload.get('sale_items')
    if sale_items:
        manual = RenderOptions.from_dict({**options_data, 'promotions': []}).best_sellers
        options_data['best_sellers'] = resolve_best_sellers(manual, sale_items)
        options_data.pop('bestSellers', None)

    return RenderOptions.from_dict(options_data)


def build_generator() -> CatalogGenerator:
    config = current_app.extensions['catalog_config']
    resolver = current_app.extensions.get('catalog_resolver')
    return CatalogGenerator(config=config, resolver=resolver)
