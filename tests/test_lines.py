from dataclasses import replace
from datetime import timedelta

from atelier.cart import CartErrorKind, add_line, make_line_id, remove_line, set_quantity, validate_add
from atelier.catalog import ProductSnapshot

from conftest import FIXED_NOW, err, ok


class TestLineId:
    def test_format(self) -> None:
        line_id = make_line_id("p1", "M", None)

        assert line_id.startswith("p1-M-no-color-")
        assert make_line_id("p1", "M", None) != line_id


class TestValidateAdd:
    def test_quantity_must_be_positive_int(self, shirt: ProductSnapshot) -> None:
        for bad in (0, -1, True, 1.5):
            assert err(validate_add(shirt, bad, None, None)).kind is CartErrorKind.VALIDATION  # type: ignore[arg-type]

    def test_unknown_size(self, shirt: ProductSnapshot) -> None:
        error = err(validate_add(shirt, 1, "XXL", None))

        assert error.kind is CartErrorKind.VALIDATION
        assert "XXL" in error.message

    def test_unknown_color(self, shirt: ProductSnapshot) -> None:
        assert err(validate_add(shirt, 1, "M", "orange")).kind is CartErrorKind.VALIDATION

    def test_product_without_variants_accepts_any(self, coat: ProductSnapshot) -> None:
        ok(validate_add(coat, 2, "one-size", "camel"))


class TestAddLine:
    def test_same_key_merges(self, shirt: ProductSnapshot) -> None:
        lines = add_line((), shirt, 1, "M", None, now=FIXED_NOW)
        lines = add_line(lines, shirt, 2, "M", None, now=FIXED_NOW + timedelta(minutes=5))

        assert len(lines) == 1
        assert lines[0].quantity == 3
        assert lines[0].added_at == FIXED_NOW

    def test_merge_keeps_locked_price(self, shirt: ProductSnapshot) -> None:
        lines = add_line((), shirt, 1, "M", None, now=FIXED_NOW)
        repriced = replace(shirt, unit_price=9900)
        lines = add_line(lines, repriced, 1, "M", None, now=FIXED_NOW)

        assert lines[0].unit_price == 5000
        assert lines[0].quantity == 2

    def test_different_variant_appends(self, shirt: ProductSnapshot) -> None:
        lines = add_line((), shirt, 1, "M", None, now=FIXED_NOW)
        lines = add_line(lines, shirt, 1, "L", None, now=FIXED_NOW)
        lines = add_line(lines, shirt, 1, "M", "navy", now=FIXED_NOW)

        assert [line.quantity for line in lines] == [1, 1, 1]
        assert len({line.id for line in lines}) == 3

    def test_input_is_not_mutated(self, shirt: ProductSnapshot) -> None:
        before = add_line((), shirt, 1, "M", None, now=FIXED_NOW, line_id="l1")
        add_line(before, shirt, 4, "M", None, now=FIXED_NOW)

        assert before[0].quantity == 1


class TestQuantity:
    def test_set_and_floor(self, shirt: ProductSnapshot, coat: ProductSnapshot) -> None:
        lines = add_line((), shirt, 1, "M", None, now=FIXED_NOW, line_id="a")
        lines = add_line(lines, coat, 1, None, None, now=FIXED_NOW, line_id="b")

        assert set_quantity(lines, "a", 5)[0].quantity == 5
        assert [line.id for line in set_quantity(lines, "a", 0)] == ["b"]
        assert [line.id for line in set_quantity(lines, "b", -3)] == ["a"]

    def test_remove_unknown_is_noop(self, shirt: ProductSnapshot) -> None:
        lines = add_line((), shirt, 1, "M", None, now=FIXED_NOW, line_id="a")

        assert remove_line(lines, "missing") == lines
