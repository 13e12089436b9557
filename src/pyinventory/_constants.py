"""Internal constants shared across the library."""

USER_AGENT = "pyinventory"

# ------------------------------------------------------------------
# REST endpoints
# ------------------------------------------------------------------

HEALTH_ENDPOINT = "/health"
AUTH_LOGIN_ENDPOINT = "/api/auth/login"
AUTH_REFRESH_ENDPOINT = "/api/auth/refresh"
AUTH_VERIFY_ENDPOINT = "/api/auth/verify"
PRODUCTS_ENDPOINT = "/api/products"
ASSETS_ENDPOINT = "/api/assets"
ANALYTICS_ENDPOINT = "/api/analytics"
STOCK_MOVEMENTS_ENDPOINT = "/api/stock/movements"

ANALYTICS_VIEWS: tuple[str, ...] = (
    "overview",
    "trends",
    "category-analysis",
    "stock-velocity",
    "insights",
    "alerts",
)

# ------------------------------------------------------------------
# Local-store keys
# ------------------------------------------------------------------

STORE_KEY_USER = "user"
STORE_KEY_TOKEN = "auth-token"
STORE_KEY_PRODUCTS = "products"
STORE_KEY_ASSETS = "assets"
STORE_KEY_NOTIFICATIONS = "notifications"

# ------------------------------------------------------------------
# Timing defaults (seconds unless noted)
# ------------------------------------------------------------------

DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 3
DEFAULT_RETRY_DELAY = 1.0
DEFAULT_MONITOR_INTERVAL = 30.0
DEFAULT_HEALTHY_THRESHOLD_MS = 5000.0
#: Tokens are valid for 7 days; renew well before that.
DEFAULT_TOKEN_REFRESH_INTERVAL = 6 * 3600.0
DEFAULT_HYBRID_MAX_ATTEMPTS = 3
DEFAULT_HYBRID_RETRY_DELAY = 1.0
DEFAULT_AUTO_REFRESH_INTERVAL = 30.0
