#!/usr/bin/env python3
"""
Invoice Field Extraction Engine - Main Entry Point.

Command-line front end for the extraction engine. It reads one document that
an upstream OCR or document-analysis step already produced and prints the
extracted fields as JSON.

Usage:
    Command Line:
        python main.py --input invoice.txt
        python main.py --input analysis.json --output fields.json
        invoice-fields -i invoice.txt --template-override --debug

    Python:
        from main import run_extraction
        result = run_extraction("invoice.txt")

Author: ML Engineering Team
Version: 1.0.0
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

# Import project modules
from config import ConfigurationManager
from invoice_fields.utils.exceptions import InputError, InvoiceFieldsError, UnsupportedDocumentError
from invoice_fields.utils.helpers import (
    ensure_directory,
    get_file_extension,
    load_block_document,
    read_text_document,
)
from invoice_fields.utils.logger import get_logger, setup_logger_from_config

TEXT_EXTENSIONS = {'.txt', '.text', ''}
BLOCK_EXTENSIONS = {'.json'}


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Argument list, defaults to sys.argv[1:].

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="Invoice Field Extraction Engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Extract from OCR text:
        python main.py --input invoice.txt

    Extract from a document-analysis response:
        python main.py --input analysis.json --output fields.json
        """
    )

    # Input/Output arguments
    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="OCR text file (.txt) or document-analysis response (.json)"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output JSON file (default: stdout)"
    )

    # Processing options
    parser.add_argument(
        "--graph",
        action="store_true",
        help="Treat the input as a block payload regardless of its extension"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--template-override",
        action="store_true",
        help="Enable the known-template override stage"
    )

    # Logging options
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only log errors"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    # A custom file is layered over the defaults on a fresh instance
    if args.config:
        ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    level = None
    if args.debug:
        level = "DEBUG"
    elif args.quiet:
        level = "ERROR"
    logger = setup_logger_from_config(level)

    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Input: {args.input}")
    logger.info(f"Output: {args.output or 'stdout'}")

    return config


def load_document(input_path: str, graph: bool = False) -> Any:
    """
    Load a source document.

    Args:
        input_path: Path to a text dump or a JSON block payload.
        graph: Force block-payload parsing.

    Returns:
        Text (str) or decoded block payload.

    Raises:
        DocumentNotFoundError: If the file does not exist.
        UnsupportedDocumentError: If the extension is not recognized.
        CorruptedDocumentError: If the file cannot be read.
    """
    extension = get_file_extension(input_path)

    if graph or extension in BLOCK_EXTENSIONS:
        return load_block_document(input_path)
    if extension in TEXT_EXTENSIONS:
        return read_text_document(input_path)

    raise UnsupportedDocumentError(
        extension,
        sorted(e for e in TEXT_EXTENSIONS | BLOCK_EXTENSIONS if e)
    )


def run_extraction(
    input_path: str,
    graph: bool = False,
    template_override: Optional[bool] = None
) -> Dict[str, Any]:
    """
    Run the extraction engine on one document.

    Args:
        input_path: Path to the source document.
        graph: Force the graph path.
        template_override: Enable the known-template stage. If None, uses
            configuration.

    Returns:
        Serializable result: the invoice record for text input, or
        ``{"lines", "key_values", "invoice"}`` for block input.

    Example:
        >>> result = run_extraction("invoice.txt")
        >>> result["total"]
        '154.06'
    """
    logger = get_logger(__name__)

    from invoice_fields.extraction import InvoiceExtractor, KnownTemplateOverride

    document = load_document(input_path, graph=graph)

    override = None
    if template_override is not None:
        override = KnownTemplateOverride(enabled=template_override)

    extractor = InvoiceExtractor(template_override=override)
    result = extractor.extract(document)

    sentinel = ConfigurationManager().get("extraction.sentinel", "Not found")
    output = result.to_dict(sentinel)

    record = result if isinstance(document, str) else result.record
    for error in record.errors:
        logger.error(error)
    for warning in record.warnings:
        logger.warning(warning)

    if record.success:
        logger.info(f"Extraction rate: {record.extraction_rate:.1f}%")

    return output


def write_output(result: Dict[str, Any], output_path: Optional[str]) -> None:
    """Write the result as JSON to a file, or to stdout."""
    text = json.dumps(result, indent=2, ensure_ascii=False)

    if output_path is None:
        print(text)
        return

    path = Path(output_path)
    ensure_directory(path.parent)
    path.write_text(text + '\n', encoding='utf-8')
    get_logger(__name__).info(f"Results written to: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        # Parse command-line arguments
        args = parse_arguments(argv)

        # Initialize system
        initialize_system(args)

        result = run_extraction(
            input_path=args.input,
            graph=args.graph,
            template_override=True if args.template_override else None
        )

        write_output(result, args.output)

        return 0

    except InputError as e:
        print(f"Processing failed: {e}", file=sys.stderr)
        return 1

    except InvoiceFieldsError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except yaml.YAMLError as e:
        print(f"Invalid configuration file: {e}", file=sys.stderr)
        return 2

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nProcess interrupted by user", file=sys.stderr)
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if "--debug" in (sys.argv if argv is None else argv):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
