import os

# In a real deployment, load these from the environment or a secrets manager
SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-for-jwt-!ChangeMe!")
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./shop_stats.sqlite3")

# Statistics reports
STATS_TOP_CLIENTS_LIMIT: int = int(os.getenv("STATS_TOP_CLIENTS_LIMIT", "5"))
STATS_QUERY_TIMEOUT_SECONDS: float = float(os.getenv("STATS_QUERY_TIMEOUT_SECONDS", "10"))
STATS_UNCATEGORIZED_LABEL: str = os.getenv("STATS_UNCATEGORIZED_LABEL", "Uncategorized")

# Comma separated logger namespaces to let through, e.g. "shop_stats.features.statistics"
LOG_NAMESPACES: list[str] = [
    ns.strip() for ns in os.getenv("LOG_NAMESPACES", "").split(",") if ns.strip()
]
