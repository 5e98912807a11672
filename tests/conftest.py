"""
Pytest configuration and shared fixtures.

Provides a sample OCR dump of the East Repair invoice, a matching
document-analysis block payload, and a fresh configuration per test.
"""

import logging

import pytest

from config import ConfigurationManager
from invoice_fields.utils.logger import ROOT_LOGGER_NAME


SAMPLE_OCR_TEXT = """\
East Repair Inc.
1912 Harvest Lane
New York, NY 12210
INVOICE # US-001
BILL TO
John Smith
2 Court Square, New York, NY 12210
SHIP TO
John Smith
3787 Pineview Drive, Cambridge, MA 12210
INVOICE DATE 11/02/2019
DUE DATE 26/02/2019
Front and rear brake cables 1 100.00 100.00
2 New set of pedal arms 1500 3000
3 Labor 3hrs 500 1500
Subtotal 145.00
Sales Tax 6.25% 906
TOTAL $154.06
"""


def word(block_id, text):
    return {"Id": block_id, "BlockType": "WORD", "Text": text}


def line(block_id, text):
    return {"Id": block_id, "BlockType": "LINE", "Text": text}


def key_value(prefix, key_words, value_words):
    """
    Build the WORD and KEY_VALUE_SET blocks of one form field.

    Returns:
        List of blocks: key words, value words, key block, value block.
    """
    key_ids = [f"{prefix}-kw{i}" for i in range(len(key_words))]
    value_ids = [f"{prefix}-vw{i}" for i in range(len(value_words))]

    blocks = [word(i, t) for i, t in zip(key_ids, key_words)]
    blocks += [word(i, t) for i, t in zip(value_ids, value_words)]
    blocks.append({
        "Id": f"{prefix}-key",
        "BlockType": "KEY_VALUE_SET",
        "EntityTypes": ["KEY"],
        "Relationships": [
            {"Type": "VALUE", "Ids": [f"{prefix}-value"]},
            {"Type": "CHILD", "Ids": key_ids},
        ],
    })
    blocks.append({
        "Id": f"{prefix}-value",
        "BlockType": "KEY_VALUE_SET",
        "EntityTypes": ["VALUE"],
        "Relationships": [{"Type": "CHILD", "Ids": value_ids}] if value_ids else [],
    })
    return blocks


@pytest.fixture(autouse=True)
def fresh_config():
    """Every test starts from the bundled settings.yaml and bare logging."""
    ConfigurationManager.reset()
    yield
    ConfigurationManager.reset()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in root_logger.handlers:
        handler.close()
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
    root_logger.propagate = True


@pytest.fixture
def ocr_text():
    return SAMPLE_OCR_TEXT


@pytest.fixture
def analysis_blocks():
    """Document-analysis response for the East Repair invoice."""
    blocks = [
        line("l1", "East Repair Inc."),
        line("l2", "BILL TO"),
        line("l3", "John Smith"),
        line("l4", "2 Court Square, New York, NY 12210"),
        line("l5", "INVOICE DATE 11/02/2019"),
        line("l6", "Front and rear brake cables 1 100.00 100.00"),
        line("l7", "Subtotal 145.00"),
        line("l8", "Sales Tax 6.25%"),
        line("l9", "TOTAL $154.06"),
    ]
    blocks += key_value("num", ["INVOICE", "#"], ["US-001"])
    blocks += key_value("bill", ["BILL", "TO"], ["John", "Smith"])
    blocks += key_value("date", ["INVOICE", "DATE"], ["11/02/2019"])
    blocks += key_value("total", ["TOTAL"], ["$154.06"])
    return blocks
