"""Configuration management for the boundary linker."""
import os
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Base paths
PROJECT_ROOT = Path(__file__).parent.parent.parent
DATA_DIR = Path(os.getenv("DATA_DIR", PROJECT_ROOT / "data"))
OUTPUT_DIR = Path(os.getenv("OUTPUT_DIR", DATA_DIR / "linked"))

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
# Children logged in full detail at the start of every run
DEBUG_SAMPLE_SIZE: int = int(os.getenv("DEBUG_SAMPLE_SIZE", "10"))

# Geometry settings
_simplify = os.getenv("SIMPLIFY_TOLERANCE")
SIMPLIFY_TOLERANCE: Optional[float] = float(_simplify) if _simplify else None

# geoBoundaries download settings
GEOBOUNDARIES_API_URL: str = os.getenv(
    "GEOBOUNDARIES_API_URL", "https://www.geoboundaries.org/api/current/gbOpen"
)
DEFAULT_COUNTRY_ISO: str = os.getenv("DEFAULT_COUNTRY_ISO", "IND")
HTTP_TIMEOUT: int = int(os.getenv("HTTP_TIMEOUT", "120"))

# Admin levels
LEVEL_NAMES = {
    "adm0": "ADM0",
    "adm1": "ADM1",
    "adm2": "ADM2",
    "adm3": "ADM3",
}


def boundary_filename(iso: str, level: str, simplified: bool = True) -> str:
    """File name geoBoundaries uses for one country/level release."""
    suffix = "_simplified" if simplified else ""
    return f"geoBoundaries-{iso.upper()}-{level.upper()}{suffix}.geojson"


def default_input_path(level: str, iso: Optional[str] = None) -> Path:
    """Default location of a downloaded boundary file."""
    return DATA_DIR / boundary_filename(iso or DEFAULT_COUNTRY_ISO, level)


def default_output_path(level: str) -> Path:
    """Default location of a linked output file for a child level."""
    return OUTPUT_DIR / f"{level.lower()}_with_parent.geojson"
