from .config import config
from .db import db, session_scope
from .logging_setup import logger, get_logger
from .exceptions import (
    FranchiseOpsError,
    ValidationError,
    NotFoundError,
    MaterialNotFoundError,
    InsufficientStockError,
    PurchaseOrderError
)

__all__ = [
    'config',
    'db',
    'session_scope',
    'logger',
    'get_logger',
    'FranchiseOpsError',
    'ValidationError',
    'NotFoundError',
    'MaterialNotFoundError',
    'InsufficientStockError',
    'PurchaseOrderError'
]
