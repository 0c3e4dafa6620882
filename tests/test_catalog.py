from atelier.catalog import MemoryCatalog, parse_product

from conftest import err, ok


class TestParseProduct:
    def test_nested_brand_and_first_image(self, catalog: MemoryCatalog) -> None:
        product = ok(parse_product({
            "id": "p1",
            "name": "Linen Shirt",
            "price": "50.00",
            "brand": {"id": "b1", "name": "Maison Lune"},
            "images": ["a.jpg", "b.jpg"],
            "sizes": ["S", "M"],
            "unknown_column": True,
        }))

        assert product.unit_price == 5000
        assert product.brand == "Maison Lune"
        assert product.image == "a.jpg"
        assert product.sizes == ("S", "M")
        assert product.colors == ()

    def test_float_price_has_no_drift(self) -> None:
        product = ok(parse_product({"id": "p3", "name": "Scarf", "price": 99.99}))

        assert product.unit_price == 9999

    def test_invalid_row_names_fields(self) -> None:
        error = err(parse_product({"id": "p9", "price": "-1"}))

        assert error.product_id == "p9"
        assert "name" in error.message
        assert "price" in error.message


class TestMemoryCatalog:
    async def test_lookup(self, catalog: MemoryCatalog) -> None:
        coat = ok(await catalog.get_product("p2"))

        assert coat.name == "Wool Coat"
        assert coat.brand == "b2"

    async def test_missing(self, catalog: MemoryCatalog) -> None:
        error = err(await catalog.get_product("nope"))

        assert "not found" in error.message
