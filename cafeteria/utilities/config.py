"""Configuration management for the cafeteria inventory service."""
import os
from typing import Final
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file if it exists
env_path = Path(__file__).parent.parent / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Application Settings
APP_HOST: Final[str] = os.getenv('APP_HOST', '0.0.0.0')
APP_PORT: Final[int] = int(os.getenv('APP_PORT', '8000'))
DEBUG: Final[bool] = os.getenv('DEBUG', 'False').lower() == 'true'
APP_VERSION: Final[str] = os.getenv('APP_VERSION', 'v6')

# Insight assistant
OPENAI_API_KEY: Final[str] = os.getenv('OPENAI_API_KEY', '')
INSIGHTS_MODEL: Final[str] = os.getenv('INSIGHTS_MODEL', 'gpt-4o-mini')
INSIGHTS_TIMEOUT_SECONDS: Final[float] = float(os.getenv('INSIGHTS_TIMEOUT_SECONDS', '20'))

# Expiration monitoring
EXPIRY_CRITICAL_DAYS: Final[int] = int(os.getenv('EXPIRY_CRITICAL_DAYS', '30'))
EXPIRY_LOOKBACK_MONTHS: Final[int] = int(os.getenv('EXPIRY_LOOKBACK_MONTHS', '6'))

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('CAFETERIA_DATA_DIR', str(BASE_DIR / 'data')))
