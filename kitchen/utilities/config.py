"""Configuration management for the kitchen costing service."""
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
CURRENCY: Final[str] = os.getenv('KITCHEN_CURRENCY', 'QAR')

# Food supply alerts
DAYS_BEFORE_EXPIRY: Final[int] = int(os.getenv('DAYS_BEFORE_EXPIRY', '5'))
LOW_STOCK_THRESHOLD: Final[dict[str, int]] = {
    "g": int(os.getenv('LOW_STOCK_THRESHOLD_G', '500')),
    "ml": int(os.getenv('LOW_STOCK_THRESHOLD_ML', '500')),
    "kg": int(os.getenv('LOW_STOCK_THRESHOLD_KG', '1')),
    "l": int(os.getenv('LOW_STOCK_THRESHOLD_L', '1')),
    "pcs": int(os.getenv('LOW_STOCK_THRESHOLD_PCS', '5')),
}

# File Paths
BASE_DIR: Final[Path] = Path(__file__).parent.parent
DATA_DIR: Final[Path] = Path(os.getenv('KITCHEN_DATA_DIR', str(BASE_DIR / 'data')))
