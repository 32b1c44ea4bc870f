"""Storefront: typed errors and Result-based catalog access.

Public API:
    - Success / Failure / Result: explicit success-or-error values
    - results: helpers for building and combining Results
    - AppException and its variants: the error taxonomy
    - CatalogProductRepository: product data operations returning Results
    - ProductBrowser: product list state driven by repository Results
    - Config: configuration dataclass
"""

from __future__ import annotations

import logging

from storefront.browse import ProductBrowser, ProductListState
from storefront.cache import ProductCache
from storefront.catalog import (
    CatalogClient,
    CatalogProductRepository,
    CatalogSource,
    ProductRepository,
)
from storefront.config import Config
from storefront.core import results
from storefront.core.exceptions import (
    AppException,
    AuthenticationException,
    BusinessLogicException,
    CacheException,
    CacheMissException,
    ConfigurationException,
    ConnectionException,
    DataException,
    DuplicateResourceException,
    ErrorKind,
    ErrorType,
    InsufficientPermissionException,
    InvalidCredentialsException,
    MissingConfigurationException,
    NetworkException,
    NotFoundException,
    RequiredFieldException,
    ResourceLockedException,
    ServerException,
    SessionInvalidException,
    TimeoutException,
    TokenExpiredException,
    ValidationException,
)
from storefront.core.result_primitives import Failure, Result, Success
from storefront.error_handler import (
    ErrorHandler,
    ErrorHandlingStrategy,
    ErrorInfo,
    get_error_handler,
)
from storefront.models import Product, ProductRatings
from storefront.retry import RetryPolicy

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("storefront")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("storefront").addHandler(logging.NullHandler())

__all__ = [
    "AppException",
    "AuthenticationException",
    "BusinessLogicException",
    "CacheException",
    "CacheMissException",
    "CatalogClient",
    "CatalogProductRepository",
    "CatalogSource",
    "Config",
    "ConfigurationException",
    "ConnectionException",
    "DataException",
    "DuplicateResourceException",
    "ErrorHandler",
    "ErrorHandlingStrategy",
    "ErrorInfo",
    "ErrorKind",
    "ErrorType",
    "Failure",
    "InsufficientPermissionException",
    "InvalidCredentialsException",
    "MissingConfigurationException",
    "NetworkException",
    "NotFoundException",
    "Product",
    "ProductBrowser",
    "ProductCache",
    "ProductListState",
    "ProductRatings",
    "ProductRepository",
    "RequiredFieldException",
    "ResourceLockedException",
    "Result",
    "RetryPolicy",
    "ServerException",
    "SessionInvalidException",
    "Success",
    "TimeoutException",
    "TokenExpiredException",
    "ValidationException",
    "get_error_handler",
    "results",
]
