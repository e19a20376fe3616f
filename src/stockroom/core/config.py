import os

# In a real deployment, load these from the environment or a secrets store
SECRET_KEY: str = os.getenv(
    "SECRET_KEY", "stockroom-dev-secret-!ChangeMe!"
)
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./stockroom.sqlite3")

# Upper bound on rows a single report reads from the store
REPORT_ROW_LIMIT: int = int(os.getenv("REPORT_ROW_LIMIT", "1000"))
# Trailing window used by consumption reports when no dates are given
REPORT_WINDOW_DAYS: int = int(os.getenv("REPORT_WINDOW_DAYS", "30"))

LOG_NAMESPACES: list[str] = [
    ns.strip() for ns in os.getenv("LOG_NAMESPACES", "").split(",") if ns.strip()
]
