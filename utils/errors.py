from typing import Optional


class ExportError(Exception):
    """Base error of the export flow, rendered as {"error": message}."""

    status_code = 500
    message = "Failed to generate Excel file"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidRequestError(ExportError):
    status_code = 400
    message = "Invalid JSON data"


class DatabaseConnectionError(ExportError):
    message = "Failed to connect to the database"


class QueryError(ExportError):
    message = "Failed to execute the query"


class SchemaError(ExportError):
    message = "Failed to fetch column names"


class SheetCreationError(ExportError):
    message = "Failed to create Excel sheet"


class RowScanError(ExportError):
    message = "Failed to scan row values"


class SerializationError(ExportError):
    message = "Failed to save Excel file"
