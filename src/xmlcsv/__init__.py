# Copyright (c) 2025 takotime808

"""xmlcsv: field-mapped CSV extraction from XML order documents."""

__all__ = [
    "load_document", "infer_fields", "detect_record_tag", "extract_rows", "extract_table", "extract_to_table",
    "to_csv", "combine", "convert_file", "convert_files", "results_to_df",
    "ExtractionOptions", "Manifest", "Field", "ConversionResult", "SemanticField",
    "SEMANTIC_FIELDS", "ParseError", "BatchConversionError", "COMBINED_FILENAME", "version",
]

from xmlcsv.core import ExtractionOptions
from xmlcsv.errors import ParseError, BatchConversionError
from xmlcsv.extractors.base import Field, ConversionResult
from xmlcsv.extractors.generic_extractor import detect_record_tag
from xmlcsv.extractors.order_extractor import SemanticField, SEMANTIC_FIELDS
from xmlcsv.outputs import to_csv
from xmlcsv.processing.manifest import Manifest

from xmlcsv.pipeline import (
    load_document,
    infer_fields,
    extract_rows,
    extract_table,
    extract_to_table,
    convert_file,
    convert_files,
    results_to_df,
    combine,
    COMBINED_FILENAME,
)

__version__ = "0.1.0"


def version() -> str:
    return __version__
