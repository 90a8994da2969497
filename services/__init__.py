"""
Services package for the customer ledger.
Provides core business logic separated from presentation and data layers.
"""

from services.aggregation import (
    TransactionFilter,
    LedgerSummary,
    LedgerView,
    filter_transactions,
    summarize
)
from services.export import (
    ExportArtifact,
    ExportFormat,
    build_artifact,
    encode_pdf,
    encode_xlsx
)
from services.ledger import LedgerService, parse_amount, parse_date_filter

__all__ = [
    # Filtering and totals
    'TransactionFilter',
    'LedgerSummary',
    'LedgerView',
    'filter_transactions',
    'summarize',
    # Export
    'ExportArtifact',
    'ExportFormat',
    'build_artifact',
    'encode_pdf',
    'encode_xlsx',
    # Service
    'LedgerService',
    'parse_amount',
    'parse_date_filter',
]
