"""
Vyapar: small-business invoicing, inventory and AI assistant toolkit.

Each subpackage hides one design decision:
- chat: how conversations reach the model and how replies are streamed back
- invoicing: how invoice rows and totals are kept consistent
- store: where records live and how changes are announced
- dashboard: how records are rolled up for display
"""

__version__ = "0.1.0"

from .chat import ChatMessage, ChatRequestContext, ChatSession, create_completion_transport
from .invoicing import InvoiceForm, InvoiceService, compute_totals, generate_invoice_number
from .store import DataStore, create_data_store

__all__ = [
    "ChatMessage",
    "ChatRequestContext",
    "ChatSession",
    "DataStore",
    "InvoiceForm",
    "InvoiceService",
    "compute_totals",
    "create_completion_transport",
    "create_data_store",
    "generate_invoice_number",
]
