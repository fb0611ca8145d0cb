import os
import sys

from dotenv import load_dotenv

from enums.order_price_source import OrderPriceSource
from enums.runtime_environment import RuntimeEnvironment

# Load .env but don't override existing environment variables
# This allows test suites to set RUNTIME_ENVIRONMENT=TEST before import
load_dotenv(".env", override=False)


def _exit_with_config_error(name: str, reason: Exception, expected: str):
    print(f"\n ERROR: Invalid {name} configuration\n", file=sys.stderr)
    print(f"Reason: {reason}", file=sys.stderr)
    print(f"Expected: {expected}", file=sys.stderr)
    print(f"Current value: {os.environ.get(name, '(not set)')}\n", file=sys.stderr)
    sys.exit(1)


try:
    _runtime_env_str = os.environ.get("RUNTIME_ENVIRONMENT")
    if not _runtime_env_str:
        raise ValueError("RUNTIME_ENVIRONMENT environment variable is not set")
    RUNTIME_ENVIRONMENT = RuntimeEnvironment(_runtime_env_str)
except ValueError as e:
    _exit_with_config_error(
        "RUNTIME_ENVIRONMENT", e, ", ".join(env.value for env in RuntimeEnvironment)
    )

# Web server
WEBAPP_HOST = os.environ.get("WEBAPP_HOST", "0.0.0.0")
WEBAPP_PORT = int(os.environ.get("WEBAPP_PORT", "5000"))

# Database
DB_NAME = os.environ.get("DB_NAME", "storefront.db")
DB_URL = os.environ.get("DB_URL") or f"sqlite+aiosqlite:///data/{DB_NAME}"

# Identity provider shared secret (signs caller tokens)
try:
    AUTH_SECRET = os.environ.get("AUTH_SECRET", "")
    if not AUTH_SECRET:
        raise ValueError("AUTH_SECRET environment variable is not set or empty")
    AUTH_TOKEN_MAX_AGE_SECONDS = int(os.environ.get("AUTH_TOKEN_MAX_AGE_SECONDS", "3600"))
    if AUTH_TOKEN_MAX_AGE_SECONDS <= 0:
        raise ValueError(f"AUTH_TOKEN_MAX_AGE_SECONDS must be positive (got: {AUTH_TOKEN_MAX_AGE_SECONDS})")
except ValueError as e:
    _exit_with_config_error("AUTH_SECRET", e, "Non-empty secret and positive token max age")

# Order creation: where the unit price snapshot comes from
try:
    ORDER_PRICE_SOURCE = OrderPriceSource(os.environ.get("ORDER_PRICE_SOURCE", OrderPriceSource.SERVER.value))
except ValueError as e:
    _exit_with_config_error(
        "ORDER_PRICE_SOURCE", e, ", ".join(source.value for source in OrderPriceSource)
    )

# Mock payment gateway
try:
    MOCK_PAYMENT_DELAY_SECONDS = float(os.environ.get("MOCK_PAYMENT_DELAY_SECONDS", "1.0"))
    MOCK_PAYMENT_SUCCESS_RATE = float(os.environ.get("MOCK_PAYMENT_SUCCESS_RATE", "0.9"))
    if not 0.0 <= MOCK_PAYMENT_SUCCESS_RATE <= 1.0:
        raise ValueError(f"MOCK_PAYMENT_SUCCESS_RATE must be within [0, 1] (got: {MOCK_PAYMENT_SUCCESS_RATE})")
    if MOCK_PAYMENT_DELAY_SECONDS < 0:
        raise ValueError(f"MOCK_PAYMENT_DELAY_SECONDS must not be negative (got: {MOCK_PAYMENT_DELAY_SECONDS})")
except ValueError as e:
    _exit_with_config_error("MOCK_PAYMENT_SUCCESS_RATE", e, "Delay >= 0 and success rate between 0 and 1")

# Catalog pagination
try:
    PAGE_ENTRIES = int(os.environ.get("PAGE_ENTRIES", "12"))
    if PAGE_ENTRIES <= 0:
        raise ValueError(f"PAGE_ENTRIES must be positive (got: {PAGE_ENTRIES})")
except ValueError as e:
    _exit_with_config_error("PAGE_ENTRIES", e, "Positive integer (e.g., 8, 12, 24)")

# Cart storage (unset REDIS_HOST keeps carts in process memory)
REDIS_HOST = os.environ.get("REDIS_HOST")
try:
    REDIS_PORT = int(os.environ.get("REDIS_PORT", "6379"))
except ValueError as e:
    _exit_with_config_error("REDIS_PORT", e, "Integer port (e.g., 6379)")
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD")

# Logging Configuration
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")  # DEBUG, INFO, WARNING, ERROR, CRITICAL
LOG_MASK_SECRETS = os.environ.get("LOG_MASK_SECRETS", "true") == "true"

# Dev keeps logs longer for debugging
if RUNTIME_ENVIRONMENT == RuntimeEnvironment.DEV:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "30"))
else:
    LOG_RETENTION_DAYS = int(os.environ.get("LOG_RETENTION_DAYS", "5"))

# Browser clients (comma-separated origins, empty disables CORS)
CORS_ALLOWED_ORIGINS = [
    origin.strip() for origin in os.environ.get("CORS_ALLOWED_ORIGINS", "").split(",") if origin.strip()
]
