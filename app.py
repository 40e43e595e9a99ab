from flask import Flask, jsonify, request, url_for, make_response
from werkzeug.exceptions import HTTPException
import logging
import os

from catalog import ProductCatalog, CatalogError, NotFoundError, ValidationError

app = Flask(__name__)

# Server config
app.config['HOST'] = os.environ.get('HOST', '127.0.0.1')
app.config['PORT'] = int(os.environ.get('PORT', '3000'))
app.config['DEBUG'] = os.environ.get('FLASK_DEBUG', 'false').lower() in ('1', 'true', 'yes')

# The product collection owned by this process; tests replace it per case
catalog = ProductCatalog()

ROUTES = (
    ('GET', '/products', 'list all products'),
    ('GET', '/products/:id', 'get a product by ID'),
    ('POST', '/products', 'create a product'),
    ('PUT', '/products/:id', 'fully update a product'),
    ('PATCH', '/products/:id', 'partially update a product'),
    ('DELETE', '/products/:id', 'delete a product'),
    ('GET', '/products/stats/summary', 'catalog statistics'),
)


# --- Response formatting helper ---

def render_response(payload, status=200, headers=None):
    """
    Response helper: render payload as JSON with the given status and headers.

    Usage: every API route returns through this helper so content types and
    status codes stay consistent.
    """
    resp = make_response(jsonify(payload), status)
    resp.headers['Content-Type'] = 'application/json; charset=utf-8'
    for k, v in (headers or {}).items():
        resp.headers[k] = v
    return resp


def _json_body():
    """
    Read the request body as a JSON object.

    Usage: a missing or unparseable body becomes an empty dict so it flows into
    the normal 400 validation path; a JSON value that is not an object raises
    ValidationError.
    """
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Invalid JSON payload')
    return data


def _error_response(err, action):
    status = 404 if isinstance(err, NotFoundError) else 400
    app.logger.warning('%s rejected (%s): %s', action, status, err)
    return render_response({'error': str(err)}, status)


# Set secure headers on all responses
@app.after_request
def set_security_headers(resp):
    resp.headers.setdefault('X-Content-Type-Options', 'nosniff')
    resp.headers.setdefault('X-Frame-Options', 'DENY')
    resp.headers.setdefault('Referrer-Policy', 'no-referrer')
    resp.headers.setdefault('Cache-Control', 'no-store')
    resp.headers.setdefault('Content-Security-Policy', "default-src 'none'; frame-ancestors 'none'; base-uri 'none'")
    return resp


@app.errorhandler(HTTPException)
def handle_http_error(err):
    # Unmatched routes (including non-numeric ids) and bad methods stay JSON
    headers = {}
    if getattr(err, 'valid_methods', None):
        headers['Allow'] = ', '.join(err.valid_methods)
    return render_response({'error': err.description}, err.code, headers=headers)


@app.errorhandler(Exception)
def handle_unexpected_error(err):
    app.logger.exception('Unhandled error on %s %s', request.method, request.path)
    return render_response({'error': 'Internal server error'}, 500)


@app.route('/')
def home():
    """
    Route: Root endpoint.

    Usage: GET / returns a small HTML page listing the available routes.
    """
    items = "".join(
        f"<li><b>{method} {path}</b> - {desc}</li>" for method, path, desc in ROUTES
    )
    return f"<h1>Product API is running!</h1><p>Available routes:</p><ul>{items}</ul>"


@app.route('/health')
def health():
    return render_response({'status': 'ok', 'products': len(catalog)}, 200)


# CRUD: Products
@app.route('/products', methods=['GET'])
def list_products():
    """
    Route: List products.

    Usage: GET /products returns every product in insertion order. Optional
    `minPrice` / `maxPrice` query params narrow the result to an inclusive
    price range; a non-numeric bound matches nothing.
    """
    products = catalog.list(
        min_price=request.args.get('minPrice'),
        max_price=request.args.get('maxPrice'),
    )
    return render_response(products, 200)


@app.route('/products', methods=['POST'])
def create_product():
    """
    Route: Create a new product.

    Usage: POST /products with JSON {name, price}. Returns 201 with the created
    product and a Location header, or 400 when a field is missing or the price
    is not a non-negative number.
    """
    try:
        data = _json_body()
        product = catalog.create(data.get('name'), data.get('price'))
    except CatalogError as err:
        return _error_response(err, 'Create product')
    app.logger.info('Created product %s (%r, %s)', product['id'], product['name'], product['price'])
    location = url_for('get_product', product_id=product['id'], _external=True)
    return render_response(
        {'message': 'Product created successfully', 'product': product},
        201,
        headers={'Location': location},
    )


@app.route('/products/<int:product_id>', methods=['GET'])
def get_product(product_id):
    try:
        product = catalog.get(product_id)
    except CatalogError as err:
        return _error_response(err, 'Get product')
    return render_response(product, 200)


@app.route('/products/<int:product_id>', methods=['PUT'])
def update_product(product_id):
    """
    Route: Replace a product.

    Usage: PUT /products/<id> with full payload {name, price}. Unknown ids give
    404 before the payload is looked at; an invalid payload gives 400.
    """
    try:
        catalog.get(product_id)
        data = _json_body()
        product = catalog.replace(product_id, data.get('name'), data.get('price'))
    except CatalogError as err:
        return _error_response(err, 'Update product')
    app.logger.info('Replaced product %s', product_id)
    return render_response({'message': 'Product fully updated', 'product': product}, 200)


@app.route('/products/<int:product_id>', methods=['PATCH'])
def patch_product(product_id):
    """
    Route: Partially update a product.

    Usage: PATCH /products/<id> with any subset of {name, price}. Omitted
    fields are left unchanged; an empty payload is a no-op that still returns
    the product.
    """
    try:
        catalog.get(product_id)
        data = _json_body()
        product = catalog.patch(product_id, data)
    except CatalogError as err:
        return _error_response(err, 'Patch product')
    app.logger.info('Patched product %s (fields: %s)', product_id, ', '.join(sorted(data)) or 'none')
    return render_response({'message': 'Product partially updated', 'product': product}, 200)


@app.route('/products/<int:product_id>', methods=['DELETE'])
def delete_product(product_id):
    try:
        deleted = catalog.delete(product_id)
    except CatalogError as err:
        return _error_response(err, 'Delete product')
    app.logger.info('Deleted product %s', product_id)
    return render_response({'message': 'Product deleted successfully', 'deletedProduct': deleted}, 200)


@app.route('/products/stats/summary', methods=['GET'])
def products_summary():
    """
    Route: Catalog statistics.

    Usage: GET /products/stats/summary returns count, total and average price
    plus the cheapest and most expensive products (null when empty).
    """
    return render_response(catalog.summary(), 200)


def main():
    """Run the development server and log the startup banner."""
    host = app.config['HOST']
    port = app.config['PORT']
    app.logger.setLevel(logging.INFO)
    banner = ["=" * 50, "Server started successfully!", "=" * 50, f"Address: http://{host}:{port}", "", "Available routes:"]
    banner += [f"   {method:<6} {path:<24} - {desc}" for method, path, desc in ROUTES]
    banner += ["=" * 50, "Press Ctrl+C to stop the server"]
    for line in banner:
        app.logger.info(line)
    app.run(debug=app.config['DEBUG'], host=host, port=port, threaded=True)


if __name__ == '__main__':
    main()
