import math
from decimal import Decimal, ROUND_HALF_UP
from itertools import count
from threading import Lock


MISSING_FIELDS_MSG = 'Not all fields are filled. Required: name, price'
INVALID_PRICE_MSG = 'Price must be a positive number'
NOT_FOUND_MSG = 'Product with this ID not found'

SEED_PRODUCTS = (
    {'id': 1, 'name': 'Smartphone X Pro', 'price': 49990},
    {'id': 2, 'name': 'Laptop Ultra 15', 'price': 89990},
    {'id': 3, 'name': 'Wireless Headphones', 'price': 5990},
    {'id': 4, 'name': 'Smart Watch 5', 'price': 15990},
)


class CatalogError(Exception):
    """Base class for errors raised by ProductCatalog."""


class ValidationError(CatalogError):
    pass


class NotFoundError(CatalogError):
    pass


def parse_price(value):
    """
    Helper: coerce a client-supplied price into a number.

    Usage: accepts ints, floats and numeric strings. Integral values come back
    as int so 49990 stays 49990 in JSON output. Raises ValidationError for
    anything else, including negatives, booleans and non-finite values.
    """
    if value is None or isinstance(value, bool):
        raise ValidationError(INVALID_PRICE_MSG)
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            raise ValidationError(INVALID_PRICE_MSG)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except (ValueError, OverflowError):
            raise ValidationError(INVALID_PRICE_MSG)
    else:
        raise ValidationError(INVALID_PRICE_MSG)
    if not math.isfinite(number) or number < 0:
        raise ValidationError(INVALID_PRICE_MSG)
    if isinstance(value, int) or number.is_integer():
        return int(number)
    return number


def _parse_filter(value):
    # Empty filters are ignored, blank ones mean 0, unparseable ones match nothing
    if value is None or value == '':
        return None
    if isinstance(value, str):
        value = value.strip() or 0
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError):
        return math.nan


def _validate_full(name, price):
    if not name or price is None:
        raise ValidationError(MISSING_FIELDS_MSG)
    if not isinstance(name, str):
        raise ValidationError('`name` must be a string')
    return parse_price(price)


class ProductCatalog:
    """
    In-memory ordered collection of product records.

    Usage: one instance is held by the request layer for the lifetime of the
    process. Records are plain dicts with id, name and price; every method
    returns copies so callers never alias the stored records. Ids come from a
    per-instance counter starting above the highest seeded id.
    """

    def __init__(self, seed=SEED_PRODUCTS):
        self._lock = Lock()
        self._products = [dict(p) for p in seed]
        start = max((p['id'] for p in self._products), default=0) + 1
        self._ids = count(start)

    def __len__(self):
        with self._lock:
            return len(self._products)

    def _find(self, product_id):
        for index, product in enumerate(self._products):
            if product['id'] == product_id:
                return index, product
        raise NotFoundError(NOT_FOUND_MSG)

    def create(self, name=None, price=None):
        price = _validate_full(name, price)
        with self._lock:
            product = {'id': next(self._ids), 'name': name, 'price': price}
            self._products.append(product)
            return dict(product)

    def list(self, min_price=None, max_price=None):
        low = _parse_filter(min_price)
        high = _parse_filter(max_price)
        with self._lock:
            products = self._products
            if low is not None:
                products = [p for p in products if p['price'] >= low]
            if high is not None:
                products = [p for p in products if p['price'] <= high]
            return [dict(p) for p in products]

    def get(self, product_id):
        with self._lock:
            return dict(self._find(product_id)[1])

    def replace(self, product_id, name=None, price=None):
        with self._lock:
            # Existence is checked before the payload
            _, product = self._find(product_id)
            price = _validate_full(name, price)
            product['name'] = name
            product['price'] = price
            return dict(product)

    def patch(self, product_id, fields):
        """
        Partially update a product from a mapping of supplied fields.

        Only keys present in `fields` are applied. A supplied name is written
        as-is (empty names included); a supplied price goes through
        parse_price. Nothing is written unless every supplied field is valid.
        """
        with self._lock:
            _, product = self._find(product_id)
            changes = {}
            if 'price' in fields:
                changes['price'] = parse_price(fields['price'])
            if 'name' in fields:
                changes['name'] = fields['name']
            product.update(changes)
            return dict(product)

    def delete(self, product_id):
        with self._lock:
            index, product = self._find(product_id)
            del self._products[index]
            return dict(product)

    def summary(self):
        with self._lock:
            products = [dict(p) for p in self._products]
        total = len(products)
        total_value = sum(p['price'] for p in products)
        if total:
            # Exact ties round up on the binary value
            average = str(Decimal(total_value / total).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP))
            cheapest = min(products, key=lambda p: p['price'])
            most_expensive = max(products, key=lambda p: p['price'])
        else:
            average = 0
            cheapest = most_expensive = None
        return {
            'totalProducts': total,
            'totalValue': total_value,
            'averagePrice': average,
            'cheapestProduct': cheapest,
            'mostExpensiveProduct': most_expensive,
        }
