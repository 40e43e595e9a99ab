import pytest

from catalog import ProductCatalog


def _make_client(monkeypatch, product_catalog):
    from app import app
    # Swap the module-level catalog for an isolated instance
    monkeypatch.setattr(__import__('app'), 'catalog', product_catalog, raising=True)
    app.config['TESTING'] = True
    return app.test_client()


@pytest.fixture
def catalog():
    return ProductCatalog()


@pytest.fixture
def client(monkeypatch, catalog):
    with _make_client(monkeypatch, catalog) as client:
        yield client


@pytest.fixture
def empty_client(monkeypatch):
    with _make_client(monkeypatch, ProductCatalog(seed=())) as client:
        yield client
