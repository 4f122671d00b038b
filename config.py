import os

DEFAULT_PORT = 8080
DEFAULT_HOST = "0.0.0.0"

# MySQL through PyMySQL
DRIVERNAME = "mysql+pymysql"
CONNECT_TIMEOUT = 10  # seconds

SHEET_TITLE = "Sheet1"


def get_port() -> int:
    port = os.environ.get("PORT")
    if not port:
        return DEFAULT_PORT
    return int(port)


def get_host() -> str:
    return os.environ.get("HOST") or DEFAULT_HOST


def get_log_level() -> str:
    return (os.environ.get("LOG_LEVEL") or "INFO").upper()
