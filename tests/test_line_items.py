import pytest

from invoice_fields.models import LineItem
from invoice_fields.text import LineItemParser


@pytest.fixture
def parser():
    return LineItemParser()


def test_trailing_quantity(parser):
    item = parser.parse_line("Front and rear brake cables 1 100.00 100.00")

    assert item == LineItem(
        description="Front and rear brake cables",
        quantity="1",
        unit_price="100.00",
        line_total="100.00",
    )


def test_leading_quantity_and_decimal_repair(parser):
    item = parser.parse_line("2 New set of pedal arms 1500 3000")

    assert item.quantity == "2"
    assert item.description == "New set of pedal arms"
    assert item.unit_price == "15.00"
    assert item.line_total == "30.00"


def test_quantity_defaults_to_one(parser):
    item = parser.parse_line("Labor 5.00 15.00")

    assert item.quantity == "1"
    assert item.description == "Labor"


def test_address_lines_are_rejected(parser):
    assert parser.parse_line("2 Court Square New York NY") is None
    assert parser.parse_line("12 Main St. 10 20") is None


def test_requires_two_trailing_numeric_tokens(parser):
    assert parser.parse_line("Subtotal 145.00") is None
    assert parser.parse_line("Sales Tax 6.25%") is None
    assert parser.parse_line("Invoice date 11/02/2019 2019") is None


def test_rows_without_description_are_skipped(parser):
    assert parser.parse_line("3 5.00 15.00") is None


def test_parse_keeps_source_order(parser, ocr_text):
    items = parser.parse(ocr_text.splitlines())

    assert [item.description for item in items] == [
        "Front and rear brake cables",
        "New set of pedal arms",
        "Labor 3hrs",
    ]
    assert [item.line_total for item in items] == ["100.00", "30.00", "15.00"]


def test_state_codes_are_not_address_keywords(parser):
    item = parser.parse_line("MA adapter 1 5.00 5.00")

    assert item.description == "MA adapter"
    assert item.quantity == "1"
    assert item.line_total == "5.00"


def test_custom_address_keywords():
    parser = LineItemParser(address_keywords=["Parts"])

    assert parser.parse_line("Spare Parts 2 10.00 20.00") is None
    assert parser.parse_line("Spare wheel 2 10.00 20.00").quantity == "2"
