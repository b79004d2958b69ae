# api/config.py
import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env from the api directory or the project root
env_path = Path(__file__).parent / '.env'
if not env_path.exists():
    env_path = Path(__file__).parent.parent / '.env'
load_dotenv(env_path)


class Config:
    DEBUG = os.environ.get('FLASK_DEBUG', '0') == '1'
    TESTING = False
    PORT = int(os.environ.get('PORT', 5000))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Comma separated, e.g. "http://localhost:5173,https://example.app"
    CORS_ORIGINS = [
        origin.strip()
        for origin in os.environ.get('CORS_ORIGINS', '*').split(',')
        if origin.strip()
    ]

    # Expense lists are small; anything past this is not a real group
    MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 1024 * 1024))
