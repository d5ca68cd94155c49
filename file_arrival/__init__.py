"""File Meta registry arrival checker.

Normalizes transfer-method status of the FILE META workbook and detects
inbound files that arrived today in the configured stage/archive directories.
"""

__version__ = "0.1.0"
