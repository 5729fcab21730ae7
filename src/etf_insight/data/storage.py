"""
Durable storage for the most recently uploaded price CSV.

Only the raw price file is persisted; holdings live in memory only.
"""

import logging
from pathlib import Path
from typing import Optional

from etf_insight.data.parsers import DataLoadError


logger = logging.getLogger(__name__)

PRICES_FILENAME = "prices.csv"


class PriceFileStore:
    """
    Stores the raw price CSV verbatim at a fixed path.

    Each save overwrites the previous file.
    """

    def __init__(self, upload_dir: str | Path):
        """
        Initialize the store.

        Args:
            upload_dir: Directory holding the persisted file
                        (created on first save)
        """
        self.upload_dir = Path(upload_dir)

    @property
    def path(self) -> Path:
        """Path of the persisted price file."""
        return self.upload_dir / PRICES_FILENAME

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, content: bytes) -> Path:
        """
        Write the raw price CSV, replacing any previous file.

        Args:
            content: Uploaded file bytes

        Returns:
            Path to the saved file
        """
        self.upload_dir.mkdir(parents=True, exist_ok=True)

        # Write beside the target, then rename over it
        tmp_path = self.path.with_suffix(".csv.tmp")
        tmp_path.write_bytes(content)
        tmp_path.replace(self.path)

        logger.info(f"Persisted price file ({len(content)} bytes) to {self.path}")
        return self.path

    def load(self) -> Optional[bytes]:
        """
        Read the persisted price CSV.

        Returns:
            File bytes, or None if nothing has been persisted

        Raises:
            DataLoadError: If the file exists but cannot be read
        """
        if not self.exists():
            return None

        try:
            return self.path.read_bytes()
        except OSError as e:
            raise DataLoadError(f"Failed to read {self.path}: {e}")
