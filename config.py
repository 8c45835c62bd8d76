import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


def _get_env(key: str, default: Optional[str] = None) -> Optional[str]:
    value = os.getenv(key)
    if value is not None and value.strip() != "":
        return value.strip()
    return default


def _get_float(key: str, default: float) -> float:
    value = _get_env(key)
    if value is None:
        return default
    return float(value)


def _get_list(key: str, default: str) -> List[str]:
    value = _get_env(key, default) or default
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass(frozen=True)
class Settings:
    orders_api_url: str
    cart_storage_dir: str
    cart_storage_key: str
    checkout_timeout: float
    cors_origins: List[str]
    log_level: str


settings = Settings(
    orders_api_url=(_get_env("ORDERS_API_URL", "https://cumall-backend.onrender.com/api") or "").rstrip("/"),
    cart_storage_dir=_get_env("CART_STORAGE_DIR", "data") or "data",
    cart_storage_key=_get_env("CART_STORAGE_KEY", "cart") or "cart",
    checkout_timeout=_get_float("CHECKOUT_TIMEOUT", 15.0),
    cors_origins=_get_list("CORS_ORIGINS", "http://localhost:3000"),
    log_level=(_get_env("LOG_LEVEL", "INFO") or "INFO").upper(),
)
