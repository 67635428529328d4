"""
Contract Validation Module

Экспорт закрытых таблиц реестра в JSON документ и его валидация (jsonschema).
"""

from .validators import (
    TABLE_SCHEMA_NAME,
    TABLE_SCHEMA_VERSION,
    SchemaLoader,
    TableDocumentValidator,
    diff_table_document,
    export_table,
    load_table_document,
    validate_table_document,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "TableDocumentValidator",
    # Functions
    "export_table",
    "diff_table_document",
    "validate_table_document",
    "load_table_document",
    # Constants
    "TABLE_SCHEMA_NAME",
    "TABLE_SCHEMA_VERSION",
]
