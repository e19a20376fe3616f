"""Tortoise-ORM configuration shared by the API, the CLI and the test suite."""

from .config import DATABASE_URL

MODEL_MODULES = [
    "stockroom.features.auth.models",
    "stockroom.features.inventory.models",
    "stockroom.features.consumption.models",
]


def build_tortoise_config(db_url: str = DATABASE_URL) -> dict:
    """Returns a Tortoise config dict pointing at ``db_url``."""
    return {
        "connections": {"default": db_url},
        "apps": {
            "models": {  # App label referenced by "models.<Model>" relations
                "models": [*MODEL_MODULES, "aerich.models"],
                "default_connection": "default",
            }
        },
        "use_tz": True,
        "timezone": "UTC",
    }


TORTOISE_ORM_CONFIG = build_tortoise_config()
