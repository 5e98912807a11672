import json

import pytest

from invoice_fields import InvoiceExtractor, InvoiceRecord, NOT_FOUND
from invoice_fields.extraction import KeyValueMapper, KnownTemplate, KnownTemplateOverride
from invoice_fields.models import GraphExtraction
from invoice_fields.text import LineItemParser
from invoice_fields.utils.exceptions import ConfigurationError


@pytest.fixture
def extractor():
    return InvoiceExtractor()


def test_text_path_extracts_all_fields(extractor, ocr_text):
    record = extractor.extract(ocr_text)

    assert isinstance(record, InvoiceRecord)
    assert record.vendor_name == "East Repair Inc."
    assert record.invoice_number == "US-001"
    assert record.buyer_name == "John Smith"
    assert record.buyer_address == "2 Court Square, New York, NY 12210"
    assert record.ship_name == "John Smith"
    assert record.ship_address == "3787 Pineview Drive, Cambridge, MA 12210"
    assert record.invoice_date == "11/02/2019"
    assert record.due_date == "26/02/2019"
    assert record.subtotal == "145.00"
    assert record.tax == "9.06"
    assert record.total == "154.06"
    assert len(record.line_items) == 3
    assert record.errors == []
    assert record.warnings == []
    assert record.success


def test_total_last_match_wins(extractor):
    record = extractor.extract("TOTAL 145.00\nTOTAL $154.06")
    assert record.total == "154.06"


def test_merged_tax_label_is_repaired(extractor):
    record = extractor.extract("Subtotal 145.00\nSales Tax6.25%\nTOTAL $154.06")
    assert record.tax == "9.06"


def test_text_path_is_idempotent(extractor, ocr_text):
    first = extractor.extract(ocr_text)
    second = extractor.extract(first.to_text())

    assert second.to_dict() == first.to_dict()


def test_item_rows_after_section_are_idempotent(extractor):
    text = "\n".join([
        "BILL TO",
        "John Smith",
        "Acme Plaza 5",
        "SHIP TO",
        "Jane Doe",
        "Widget 2 10.00 20.00",
        "Subtotal 20.00",
        "TOTAL 20.00",
    ])
    first = extractor.extract(text)
    second = extractor.extract(first.to_text())

    assert first.ship_address is None
    assert len(first.line_items) == 1
    assert second.to_dict() == first.to_dict()


def test_oversized_subtotal_keeps_other_fields(extractor):
    subtotal = "1" + "0" * 40 + ".00"
    record = extractor.extract(f"East Repair Inc.\nSubtotal {subtotal}\nSales Tax 6.25%\nTOTAL 5.00")

    assert record.vendor_name == "East Repair Inc."
    assert record.subtotal == subtotal
    assert record.tax is None
    assert record.total == "5.00"
    assert record.errors == []
    assert any(w.startswith("Subtotal + tax") for w in record.warnings)


def test_missing_fields_serialize_as_sentinel(extractor):
    data = extractor.extract("TOTAL 10.00").to_dict()

    assert data["total"] == "10.00"
    assert data["vendor_name"] == NOT_FOUND
    assert data["buyer_address"] == NOT_FOUND
    assert data["line_items"] == []
    assert all(isinstance(v, str) for k, v in data.items() if k != "line_items")


def test_record_round_trips_through_boundary_format(extractor, ocr_text):
    record = extractor.extract(ocr_text)
    restored = InvoiceRecord.from_dict(json.loads(record.to_json()))

    assert restored.to_dict() == record.to_dict()


@pytest.mark.parametrize("document", [None, "", "\n\n", "garbage ### 12 ,,, %%%", b"TOTAL 5.00"])
def test_malformed_text_never_raises(extractor, document):
    record = extractor.extract(document)
    assert isinstance(record, InvoiceRecord)
    assert record.errors == []


def test_unexpected_failure_is_recorded(ocr_text):
    class BrokenParser(LineItemParser):
        def parse(self, lines):
            raise RuntimeError("boom")

    record = InvoiceExtractor(item_parser=BrokenParser()).extract(ocr_text)

    assert record.total is None
    assert record.errors == ["Extraction failed: boom"]
    assert not record.success


def test_graph_path(extractor, analysis_blocks):
    result = extractor.extract(analysis_blocks)

    assert isinstance(result, GraphExtraction)
    assert result.key_values["INVOICE #"] == "US-001"
    assert result.lines[0] == "East Repair Inc."

    record = result.record
    assert record.vendor_name == "East Repair Inc."
    assert record.invoice_number == "US-001"
    assert record.buyer_name == "John Smith"
    assert record.buyer_address == "2 Court Square, New York, NY 12210"
    assert record.invoice_date == "11/02/2019"
    assert record.subtotal == "145.00"
    assert record.tax == "9.06"
    assert record.total == "154.06"
    assert [item.description for item in record.line_items] == ["Front and rear brake cables"]


def test_graph_result_serializes(extractor, analysis_blocks):
    data = json.loads(extractor.extract({"Blocks": analysis_blocks}).to_json())

    assert set(data) == {"lines", "key_values", "invoice"}
    assert data["key_values"]["TOTAL"] == "$154.06"
    assert data["invoice"]["ship_name"] == NOT_FOUND


@pytest.mark.parametrize("payload", [[], {}, [1, 2, 3], {"Blocks": None}])
def test_malformed_graph_never_raises(extractor, payload):
    result = extractor.extract(payload)

    assert result.key_values == {}
    assert result.lines == []
    assert result.record.errors == []


def test_mapper_prefers_form_values_over_lines():
    record = KeyValueMapper().map(
        {"Invoice Number:": "A-17", "Sales Tax 6.25%": "9.06", "Total": "$20.00"},
        ["INVOICE # B-99", "TOTAL 30.00"],
    )

    assert record.invoice_number == "A-17"
    assert record.tax == "9.06"
    assert record.total == "$20.00"


def test_mapper_skips_unknown_and_empty_labels():
    record = KeyValueMapper().map({"Terms": "Net 30", "DUE DATE": ""}, [])

    assert record.fields == InvoiceRecord().fields


SAMPLE_TEMPLATE = KnownTemplate(
    name="sample",
    match=("East Repair Inc.", "BILL TO"),
    replacement="East Repair Inc.\nINVOICE # US-001\nTOTAL $154.06",
)


def test_template_override_disabled_by_default():
    override = KnownTemplateOverride()

    assert not override.enabled
    assert override.apply("East Repair Inc.\nBILL TO") == "East Repair Inc.\nBILL TO"


def test_template_override_applies_when_all_markers_present():
    override = KnownTemplateOverride(enabled=True, templates=[SAMPLE_TEMPLATE])

    assert override.apply("east repair inc.\n  BILL TO\nnoise") == SAMPLE_TEMPLATE.replacement
    assert override.apply("East Repair Inc.\nSHIP TO") == "East Repair Inc.\nSHIP TO"


def test_template_override_in_pipeline():
    override = KnownTemplateOverride(enabled=True, templates=[SAMPLE_TEMPLATE])
    record = InvoiceExtractor(template_override=override).extract("East Repair Inc.\nBILL TO\n??")

    assert record.invoice_number == "US-001"
    assert record.total == "154.06"


def test_configured_template_reproduces_sample(ocr_text):
    override = KnownTemplateOverride(enabled=True)
    record = InvoiceExtractor(template_override=override).extract(ocr_text)

    assert record.invoice_number == "US-001"
    assert record.tax == "9.06"
    assert record.total == "154.06"
    assert [item.quantity for item in record.line_items] == ["1", "2", "3"]


def test_malformed_template_raises():
    with pytest.raises(ConfigurationError):
        KnownTemplateOverride(enabled=True, templates=[{"name": "x", "match": []}])
