import os

# In a real deployment, load these from the environment or a secrets manager
SECRET_KEY: str = os.getenv(
    "SECRET_KEY", "farmledger-dev-secret-!ChangeMe!"
)  # TODO: Fail startup when SECRET_KEY is left at the dev default outside tests
ALGORITHM: str = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite://./farmledger.sqlite3")

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
# Comma separated logger prefixes, e.g. "farmledger.features.reports,farmledger.main"
LOG_NAMESPACES: list[str] = [
    ns.strip() for ns in os.getenv("LOG_NAMESPACES", "").split(",") if ns.strip()
]

# Average goat gestation
GESTATION_DAYS: int = int(os.getenv("GESTATION_DAYS", "150"))

REPORT_DETAILS_DEFAULT_LIMIT: int = int(os.getenv("REPORT_DETAILS_DEFAULT_LIMIT", "500"))
REPORT_DETAILS_MAX_LIMIT: int = int(os.getenv("REPORT_DETAILS_MAX_LIMIT", "1000"))

# Window used for "upcoming" health treatments
DUE_SOON_DAYS: int = int(os.getenv("DUE_SOON_DAYS", "30"))
