import os
from pathlib import Path

HOST = os.getenv("SMM_HOST", "")
USERNAME = os.getenv("SMM_USERNAME", "")
PASSWORD = os.getenv("SMM_PASSWORD", "")

CREDENTIALS_FILE = Path(
    os.getenv("SMM_CREDENTIALS_FILE", "./smm_credentials.json")
).resolve()

USER_AGENT = os.getenv("SMM_USER_AGENT", "smm-agent/0.1 (+contact)")
CONNECT_TIMEOUT_S = float(os.getenv("SMM_CONNECT_TIMEOUT_S", "5.0"))
READ_TIMEOUT_S = float(os.getenv("SMM_READ_TIMEOUT_S", "30.0"))
REQUESTS_PER_MINUTE = int(os.getenv("SMM_REQUESTS_PER_MINUTE", "120"))

# The server is usually run with a self signed certificate
VERIFY_TLS = os.getenv("SMM_VERIFY_TLS", "0").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("SMM_LOG_LEVEL", "WARNING")
