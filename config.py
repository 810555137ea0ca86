import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# PixelMind API Configuration
PIXELMIND_API_BASE_URL = os.getenv("PIXELMIND_API_BASE_URL", "http://localhost:3000")
MODELS_ENDPOINT = "/api/models"
SCHEMA_ENDPOINT = "/api/schema"
IMAGE_ENDPOINT = "/api/image"

# API Timeout Configuration
PIXELMIND_CATALOG_TIMEOUT = float(os.getenv("PIXELMIND_CATALOG_TIMEOUT", "15"))  # seconds
PIXELMIND_SCHEMA_TIMEOUT = float(os.getenv("PIXELMIND_SCHEMA_TIMEOUT", "15"))  # seconds
PIXELMIND_IMAGE_TIMEOUT = float(
    os.getenv("PIXELMIND_IMAGE_TIMEOUT", "120")
)  # seconds, generation is slow

# Download Configuration
PIXELMIND_DOWNLOAD_DIR = os.getenv("PIXELMIND_DOWNLOAD_DIR", ".")
PIXELMIND_DOWNLOAD_FILENAME = os.getenv(
    "PIXELMIND_DOWNLOAD_FILENAME", "pixelmind-creation.png"
)

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", "logs/pixelmind.log")
