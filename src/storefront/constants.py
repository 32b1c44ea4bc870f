"""Project-wide constants for the storefront catalog."""  # noqa: D415

# ==============================================================================
# Catalog API
# ==============================================================================

DEFAULT_BASE_URL = "https://dummyjson.com"

PRODUCTS_ENDPOINT = "/products"
CATEGORIES_ENDPOINT = "/products/categories"
PRODUCTS_BY_CATEGORY_ENDPOINT = "/products/category"
SEARCH_ENDPOINT = "/products/search"

SEARCH_QUERY_PARAM = "q"

# ==============================================================================
# Catalog business rules
# ==============================================================================

ALL_CATEGORIES = "All"

FEATURED_MIN_RATING = 4.0
FEATURED_LIMIT = 10

SALE_MIN_PRICE = 50.0
SALE_LIMIT = 8

RELATED_PRODUCTS_LIMIT = 4

# ==============================================================================
# Cache keys
# ==============================================================================

PRODUCTS_CACHE_KEY = "products:all"
CATEGORIES_CACHE_KEY = "categories:all"
