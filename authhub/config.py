import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./authhub.db")

# Public URLs used when building email contexts and internal sender identities
API_ROOT_URL = os.getenv("API_ROOT_URL", "http://localhost:3100")

# Resend Email Configuration
EMAIL_PROVIDER_API_KEY = os.getenv("EMAIL_PROVIDER_API_KEY")
# Domain used by the fixed internal senders (support, founder)
INTERNAL_EMAIL_DOMAIN = os.getenv("INTERNAL_EMAIL_DOMAIN", "authhub.dev")
INTERNAL_EMAIL_FROM_NAME = os.getenv("INTERNAL_EMAIL_FROM_NAME", "AuthHub")
FOUNDER_NAME = os.getenv("FOUNDER_NAME", "The AuthHub Founders")

# Shared secret for internal (server-to-server) reads of environment app data
INTERNAL_API_KEY = os.getenv("INTERNAL_API_KEY")

# Defaults for newly provisioned environments
TOKEN_EXPIRATION_DEFAULT = os.getenv("TOKEN_EXPIRATION_DEFAULT", "1d")
REFRESH_TOKEN_EXPIRATION_DEFAULT = os.getenv("REFRESH_TOKEN_EXPIRATION_DEFAULT", "5d")
DEFAULT_ENVIRONMENT_NAME = os.getenv("DEFAULT_ENVIRONMENT_NAME", "Production")
