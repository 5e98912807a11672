import pytest

from invoice_fields.text import LineClassifier, split_lines
from invoice_fields.utils.exceptions import ConfigurationError


@pytest.fixture
def classifier():
    return LineClassifier()


def test_split_lines_trims_and_drops_blanks():
    assert split_lines("  BILL TO \n\n\t John Smith\r\n  ") == ["BILL TO", "John Smith"]
    assert split_lines("") == []
    assert split_lines(None) == []


def test_buyer_section_name_and_address(classifier):
    lines = "\n".join([
        "BILL TO",
        "John Smith",
        "2 Court Square, New York, NY 12210",
        "SHIP TO",
        "Jane Doe",
    ])
    buyer = classifier.classify(lines).section(LineClassifier.BUYER)

    assert buyer.name == "John Smith"
    assert buyer.address == "2 Court Square, New York, NY 12210"


def test_ship_to_section_stops_at_invoice_date(classifier, ocr_text):
    ship_to = classifier.classify(ocr_text).section(LineClassifier.SHIP_TO)

    assert ship_to.name == "John Smith"
    assert ship_to.address == "3787 Pineview Drive, Cambridge, MA 12210"


def test_multi_line_address_is_comma_joined(classifier):
    text = "Bill to:\nJohn Smith\n2 Court Square\nNew York, NY 12210\nSubtotal 145.00"
    buyer = classifier.classify(text).section(LineClassifier.BUYER)

    assert buyer.address == "2 Court Square, New York, NY 12210"


def test_section_ends_at_item_row(classifier):
    text = "BILL TO\nJohn Smith\nAcme Plaza 5\nSHIP TO\nJane Doe\nWidget 2 10.00 20.00\nTOTAL 20.00"
    document = classifier.classify(text)

    assert document.section(LineClassifier.BUYER).address == "Acme Plaza 5"
    assert document.section(LineClassifier.SHIP_TO).lines == ["Jane Doe"]
    assert document.section(LineClassifier.SHIP_TO).address is None


def test_empty_section_leaves_fields_unset(classifier):
    document = classifier.classify("BILL TO\nSHIP TO\nJohn Smith")

    assert document.section(LineClassifier.BUYER).name is None
    assert document.section(LineClassifier.BUYER).address is None
    assert document.section(LineClassifier.SHIP_TO).name == "John Smith"
    assert document.section(LineClassifier.SHIP_TO).address is None


def test_missing_section_is_absent(classifier):
    document = classifier.classify("East Repair Inc.\nTOTAL 10.00")

    assert LineClassifier.BUYER not in document.sections
    assert document.section(LineClassifier.BUYER).name is None


def test_anchor_must_be_whole_line(classifier):
    document = classifier.classify("Please BILL TO the account below\nJohn Smith")
    assert LineClassifier.BUYER not in document.sections


def test_scalars(classifier, ocr_text):
    scalars = classifier.classify(ocr_text).scalars

    assert scalars["vendor_name"] == "East Repair Inc."
    assert scalars["invoice_number"] == "US-001"
    assert scalars["invoice_date"] == "11/02/2019"
    assert scalars["due_date"] == "26/02/2019"


def test_vendor_tolerates_trailing_punctuation(classifier):
    assert classifier.classify("east repair inc,").scalars["vendor_name"] == "east repair inc"


def test_invoice_date_requires_date_token(classifier):
    document = classifier.classify("INVOICE DATE pending\nINVOICE DATE 3/4/2020")
    assert document.scalars["invoice_date"] == "3/4/2020"


def test_custom_vendor_patterns():
    classifier = LineClassifier(vendor_patterns=[r"^(ACME\s+Corp)\b"])
    assert classifier.classify("ACME Corp Ltd\nTOTAL 5.00").scalars["vendor_name"] == "ACME Corp"


def test_invalid_vendor_pattern_raises():
    with pytest.raises(ConfigurationError):
        LineClassifier(vendor_patterns=["(unclosed"])


def test_total_takes_last_match(classifier):
    assert classifier.classify("TOTAL 145.00\nTOTAL $154.06").total == "154.06"


def test_total_repairs_missing_decimal(classifier):
    assert classifier.classify("TOTAL 1500").total == "15.00"


def test_subtotal_is_line_anchored(classifier):
    assert classifier.classify("Amount before Subtotal 1.00").subtotal is None
    assert classifier.classify("Subtotal: 145.00").subtotal == "145.00"


def test_tax_from_percentage(classifier):
    document = classifier.classify("Subtotal 145.00\nSales Tax 6.25%\nTOTAL $154.06")

    assert document.tax == "9.06"
    assert document.tax_rate == "6.25"


def test_percentage_overrides_literal_tax(classifier):
    document = classifier.classify("Subtotal 145.00\nSales Tax 6.25% 9.10")
    assert document.tax == "9.06"


def test_percentage_needs_subtotal(classifier):
    document = classifier.classify("Sales Tax 6.25%\nTOTAL 10.00")

    assert document.tax is None
    assert document.tax_rate is None


def test_literal_tax_fallback(classifier):
    document = classifier.classify("Subtotal 145.00\nTax 906\nTOTAL 154.06")

    assert document.tax == "9.06"
    assert document.tax_rate is None


def test_empty_text(classifier):
    document = classifier.classify("")

    assert document.lines == []
    assert document.total is None
    assert all(value is None for value in document.scalars.values())
