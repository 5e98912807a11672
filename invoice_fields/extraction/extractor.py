"""
Invoice Extractor Module.

This module provides the InvoiceExtractor class, the single entry point of
the engine. It accepts either input shape and routes it to its adapter:

    text   -> template override -> text repairs -> LineClassifier
           -> LineItemParser -> PostProcessor -> InvoiceRecord
    blocks -> GraphKeyValueExtractor -> KeyValueMapper
           -> PostProcessor -> GraphExtraction

Calls are stateless: components are built once and only read afterwards,
so one extractor can serve many threads.

Author: ML Engineering Team
"""

import time
from typing import Any, Optional, Union

from invoice_fields.utils.logger import get_logger
from invoice_fields.models.invoice_record import GraphExtraction, InvoiceRecord
from invoice_fields.graph.key_values import GraphKeyValueExtractor
from invoice_fields.text.classifier import ClassifiedDocument, LineClassifier
from invoice_fields.text.line_items import LineItemParser
from invoice_fields.postprocessor.normalizers import AmountNormalizer
from invoice_fields.postprocessor.processor import PostProcessor
from .key_value_mapper import KeyValueMapper
from .template_override import KnownTemplateOverride

# Initialize module logger
logger = get_logger(__name__)


class InvoiceExtractor:
    """
    Extracts structured invoice fields from OCR text or a block graph.

    Malformed input never raises: unresolved fields stay None, and any
    unexpected failure is logged and recorded on the result's ``errors``.

    Attributes:
        amount_normalizer: Shared AmountNormalizer
        classifier: LineClassifier for the text path
        item_parser: LineItemParser for both paths
        graph_extractor: GraphKeyValueExtractor for the graph path
        key_value_mapper: Maps form pairs onto record fields
        post_processor: Normalizes and validates every record
        template_override: Optional known-template stage

    Example:
        >>> extractor = InvoiceExtractor()
        >>> record = extractor.extract(ocr_text)
        >>> record.total
        '154.06'
        >>> graph = extractor.extract(response["Blocks"])
        >>> graph.key_values["INVOICE #"]
        'US-001'
    """

    def __init__(
        self,
        classifier: Optional[LineClassifier] = None,
        item_parser: Optional[LineItemParser] = None,
        post_processor: Optional[PostProcessor] = None,
        template_override: Optional[KnownTemplateOverride] = None,
        amount_normalizer: Optional[AmountNormalizer] = None
    ) -> None:
        """
        Initialize the extractor.

        Components not given are built from configuration.
        """
        self.amount_normalizer = amount_normalizer or AmountNormalizer()
        self.item_parser = item_parser or LineItemParser(amount_normalizer=self.amount_normalizer)
        self.classifier = classifier or LineClassifier(
            amount_normalizer=self.amount_normalizer,
            item_parser=self.item_parser
        )
        self.post_processor = post_processor or PostProcessor(amount_normalizer=self.amount_normalizer)
        self.template_override = template_override or KnownTemplateOverride()

        self.graph_extractor = GraphKeyValueExtractor()
        self.key_value_mapper = KeyValueMapper(self.classifier, self.item_parser)

        logger.info(
            f"InvoiceExtractor initialized "
            f"(template override: {'on' if self.template_override.enabled else 'off'})"
        )

    def extract(self, document: Any) -> Union[InvoiceRecord, GraphExtraction]:
        """
        Extract fields from either input shape.

        Args:
            document: Raw OCR text (str), or a block payload (list of blocks
                or a ``{"Blocks": [...]}`` response).

        Returns:
            InvoiceRecord for text, GraphExtraction for blocks.
        """
        if document is None or isinstance(document, str):
            return self.extract_from_text(document)
        if isinstance(document, bytes):
            return self.extract_from_text(document.decode('utf-8', errors='replace'))
        return self.extract_from_blocks(document)

    def extract_from_text(self, text: Optional[str]) -> InvoiceRecord:
        """
        Run the text path.

        Args:
            text: Recognized text of one document.

        Returns:
            Processed InvoiceRecord.
        """
        start_time = time.time()

        try:
            text = text if isinstance(text, str) else ''
            text = self.template_override.apply(text)
            text = self.amount_normalizer.repair_text(text)

            document = self.classifier.classify(text)
            record = self._record_from_document(document)
            record.line_items = self.item_parser.parse(document.lines)

            record = self.post_processor.process(record)

        except Exception as e:
            logger.exception(f"Text extraction failed: {e}")
            record = InvoiceRecord()
            record.add_error(f"Extraction failed: {str(e)}")

        logger.info(
            f"Text extraction complete: {len(record.extracted_fields)}/"
            f"{len(record.fields)} fields, {len(record.line_items)} line items, "
            f"time: {time.time() - start_time:.3f}s"
        )
        return record

    def extract_from_blocks(self, payload: Any) -> GraphExtraction:
        """
        Run the graph path.

        Args:
            payload: Block list or analysis response.

        Returns:
            GraphExtraction with the key/value map, LINE text and the
            processed record.
        """
        start_time = time.time()
        result = GraphExtraction()

        try:
            result.key_values = self.graph_extractor.extract(payload)
            result.lines = self.graph_extractor.extract_lines(payload)

            record = self.key_value_mapper.map(result.key_values, result.lines)
            result.record = self.post_processor.process(record)

        except Exception as e:
            logger.exception(f"Graph extraction failed: {e}")
            result.record.add_error(f"Extraction failed: {str(e)}")

        logger.info(
            f"Graph extraction complete: {len(result.key_values)} pairs, "
            f"{len(result.lines)} lines, "
            f"{len(result.record.extracted_fields)}/{len(result.record.fields)} fields, "
            f"time: {time.time() - start_time:.3f}s"
        )
        return result

    def _record_from_document(self, document: ClassifiedDocument) -> InvoiceRecord:
        buyer = document.section(LineClassifier.BUYER)
        ship_to = document.section(LineClassifier.SHIP_TO)

        return InvoiceRecord(
            vendor_name=document.scalars.get("vendor_name"),
            invoice_number=document.scalars.get("invoice_number"),
            buyer_name=buyer.name,
            buyer_address=buyer.address,
            ship_name=ship_to.name,
            ship_address=ship_to.address,
            invoice_date=document.scalars.get("invoice_date"),
            due_date=document.scalars.get("due_date"),
            subtotal=document.subtotal,
            tax=document.tax,
            total=document.total,
        )
