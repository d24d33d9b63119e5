"""
Error taxonomy shared by the data-access and service layers.

- `DataAccessError`: database unreachable, pool not open, statement rejected.
- `ConstraintViolationError`: the database refused the values (NOT NULL, bad data).
"""

from __future__ import annotations


class DataAccessError(RuntimeError):
    pass


class ConstraintViolationError(DataAccessError):
    pass


class BulkUploadError(ConstraintViolationError):
    def __init__(self, message: str, *, index: int) -> None:
        super().__init__(message)
        self.index = index


