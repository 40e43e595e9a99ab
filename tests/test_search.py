def _ids(rv):
    assert rv.status_code == 200
    res = rv.get_json()
    assert isinstance(res, list)
    return [p['id'] for p in res]


def test_products_min_price(client):
    assert _ids(client.get('/products?minPrice=10000')) == [1, 2, 4]


def test_products_max_price(client):
    assert _ids(client.get('/products?maxPrice=15990')) == [3, 4]


def test_products_price_range(client):
    assert _ids(client.get('/products?minPrice=6000&maxPrice=50000')) == [1, 4]


def test_products_range_no_match(client):
    assert _ids(client.get('/products?minPrice=100000')) == []


def test_products_empty_filter_ignored(client):
    assert _ids(client.get('/products?minPrice=&maxPrice=')) == [1, 2, 3, 4]


def test_products_non_numeric_filter_matches_nothing(client):
    assert _ids(client.get('/products?minPrice=cheap')) == []


def test_products_list_reflects_creates_and_deletes(client):
    rv = client.post('/products', json={'name': 'Tablet', 'price': 29990})
    new_id = rv.get_json()['product']['id']
    client.delete('/products/2')
    assert _ids(client.get('/products')) == [1, 3, 4, new_id]
    assert _ids(client.get('/products?minPrice=20000')) == [1, new_id]


def test_products_blank_filter_means_zero(client):
    assert _ids(client.get('/products?minPrice=%20')) == [1, 2, 3, 4]
    assert _ids(client.get('/products?maxPrice=%20')) == []
