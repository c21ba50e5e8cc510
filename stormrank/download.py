"""
Dataset download (local cache)
==============================

Fetches the compressed Storm Data file once and keeps it on disk. The file
is NOT decompressed here: pandas reads .bz2/.gz directly.
"""

from __future__ import annotations
import logging
import os

import requests

logger = logging.getLogger(__name__)

STORM_DATA_URL = "https://d396qusza40orc.cloudfront.net/repdata%2Fdata%2FStormData.csv.bz2"
DEFAULT_FILE_NAME = "StormData.csv.bz2"


def fetch_dataset(
    url: str = STORM_DATA_URL,
    dest: str = DEFAULT_FILE_NAME,
    *,
    force: bool = False,
    timeout: float = 60.0,
    chunk_size: int = 1 << 16,
) -> str:
    """Download `url` to `dest` unless it is already cached. Returns `dest`."""
    if os.path.exists(dest) and not force:
        logger.info("Using cached dataset %s", dest)
        return dest

    os.makedirs(os.path.dirname(dest) or ".", exist_ok=True)
    tmp = dest + ".part"
    logger.info("Downloading %s -> %s", url, dest)
    response = requests.get(url, stream=True, timeout=timeout)
    response.raise_for_status()
    try:
        with open(tmp, "wb") as f:
            for chunk in response.iter_content(chunk_size=chunk_size):
                if chunk:
                    f.write(chunk)
        os.replace(tmp, dest)
    finally:
        response.close()
        if os.path.exists(tmp):
            os.remove(tmp)

    logger.info("Downloaded %.1f MB", os.path.getsize(dest) / 1024 / 1024)
    return dest
