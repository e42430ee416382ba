"""
Database access: a thin motor client wrapper.
"""

from common.database.mongodb import MongoDB, redact_uri

__all__ = ["MongoDB", "redact_uri"]
