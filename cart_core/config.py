import os
from dataclasses import dataclass

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

TRUTHY = ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    seed_path: str
    cart_persistence: bool  # по умолчанию выключено, как в исходной версии
    cart_store_path: str
    cart_store_key: str
    log_level: str


def load_settings(env=None) -> Settings:
    """Читает настройки из переменных окружения SHOP_*"""
    env = os.environ if env is None else env
    return Settings(
        seed_path=env.get("SHOP_SEED_PATH", os.path.join(ROOT_DIR, "data", "seed.json")),
        cart_persistence=env.get("SHOP_CART_PERSISTENCE", "").strip().lower() in TRUTHY,
        cart_store_path=env.get("SHOP_CART_STORE_PATH", ".cart_store.json"),
        cart_store_key=env.get("SHOP_CART_STORE_KEY", "cart"),
        log_level=env.get("SHOP_LOG_LEVEL", "INFO"),
    )
