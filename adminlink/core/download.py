"""Download of geoBoundaries releases."""
from pathlib import Path
from typing import Optional

import requests

from adminlink.core.config import GEOBOUNDARIES_API_URL, HTTP_TIMEOUT, boundary_filename
from adminlink.core.errors import InputSourceError
from adminlink.utils.logging import log_structured


def resolve_download_url(iso: str, level: str, simplified: bool = True, api_url: Optional[str] = None) -> str:
    """
    Ask the geoBoundaries API where the GeoJSON for one country/level lives.

    Args:
        iso: ISO 3166-1 alpha-3 country code (e.g. "IND")
        level: Admin level ("ADM0" ... "ADM3")
        simplified: Prefer the simplified geometry release
        api_url: API base URL (defaults to config)

    Returns:
        GeoJSON download URL

    Raises:
        InputSourceError: on HTTP failure or an unexpected API response
    """
    url = f"{(api_url or GEOBOUNDARIES_API_URL).rstrip('/')}/{iso.upper()}/{level.upper()}/"
    try:
        response = requests.get(url, timeout=HTTP_TIMEOUT)
        response.raise_for_status()
        metadata = response.json()
    except (requests.RequestException, ValueError) as e:
        raise InputSourceError(f"geoBoundaries API request failed for {iso}/{level}: {e}") from e

    key = "simplifiedGeometryGeoJSON" if simplified else "gjDownloadURL"
    download_url = metadata.get(key) if isinstance(metadata, dict) else None
    if not download_url:
        raise InputSourceError(f"geoBoundaries API returned no {key} for {iso}/{level}")
    return download_url


def download_boundaries(
    iso: str,
    level: str,
    dest_dir: Path,
    simplified: bool = True,
    api_url: Optional[str] = None,
    overwrite: bool = False,
) -> Path:
    """
    Download one geoBoundaries GeoJSON file.

    Args:
        iso: ISO 3166-1 alpha-3 country code
        level: Admin level ("ADM0" ... "ADM3")
        dest_dir: Directory to write into
        simplified: Download the simplified release
        api_url: API base URL (defaults to config)
        overwrite: Replace an existing file

    Returns:
        Path of the downloaded file

    Raises:
        InputSourceError: if the download fails
    """
    dest_dir = Path(dest_dir)
    dest = dest_dir / boundary_filename(iso, level, simplified)
    if dest.exists() and not overwrite:
        log_structured("info", f"Using existing {dest.name}", path=str(dest))
        return dest

    download_url = resolve_download_url(iso, level, simplified, api_url)
    dest_dir.mkdir(parents=True, exist_ok=True)
    partial = dest.with_name(dest.name + ".partial")

    log_structured("info", f"Downloading {iso.upper()} {level.upper()}", url=download_url)
    try:
        with requests.get(download_url, stream=True, timeout=HTTP_TIMEOUT) as response:
            response.raise_for_status()
            with open(partial, "wb") as f:
                for chunk in response.iter_content(chunk_size=1 << 16):
                    if chunk:
                        f.write(chunk)
    except requests.RequestException as e:
        if partial.exists():
            partial.unlink()
        raise InputSourceError(f"Download failed for {download_url}: {e}") from e

    partial.replace(dest)
    log_structured("info", f"Saved {dest.name}", path=str(dest), bytes=dest.stat().st_size)
    return dest
