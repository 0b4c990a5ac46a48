"""Error reporting: error documents, message tables, and message resolution."""

from ruleweave.errors.compiler import (
    ErrorCompiler,
    ErrorDocument,
    ErrorEntry,
    error_document_to_dict,
)
from ruleweave.errors.messages import (
    DEFAULT_LOCALE,
    MessageTable,
    default_messages,
    load_messages,
    type_names,
)
from ruleweave.errors.resolver import MessageResolver, interpolate

__all__ = [
    "DEFAULT_LOCALE",
    "ErrorCompiler",
    "ErrorDocument",
    "ErrorEntry",
    "MessageResolver",
    "MessageTable",
    "default_messages",
    "error_document_to_dict",
    "interpolate",
    "load_messages",
    "type_names",
]
