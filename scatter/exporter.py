"""
Exporter Module - Save thumbnails as PNG with proper naming convention
"""

import json
import re
from datetime import datetime
from pathlib import Path
from typing import Optional

import numpy as np
from loguru import logger

from config import settings
from utils.image_utils import save_image, encode_png


class Exporter:
    """
    Exports thumbnails with consistent naming and optional versioning
    """

    def __init__(self, output_dir: Path = None):
        """
        Initialize Exporter

        Args:
            output_dir: Output directory (default: workspace/out)
        """
        self.output_dir = Path(output_dir or settings.OUT_DIR)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.extension = settings.OUTPUT_FORMAT

        logger.info(f"Exporter initialized with output dir: {self.output_dir}")

    def generate_filename(
        self,
        title: str,
        version: Optional[int] = None,
        date: Optional[str] = None
    ) -> str:
        """
        Generate filename following pattern: TITLE__YYYYMMDD_HHMMSS__vXXX.png

        Args:
            title: Thumbnail title
            version: Version number (auto-increment if None)
            date: Date string (use today if None)

        Returns:
            Filename string
        """
        clean_title = self._clean_title(title)

        now = datetime.now()
        if date is None:
            date = now.strftime("%Y%m%d")
        datetime_str = f"{date}_{now.strftime('%H%M%S')}"

        if version is None:
            version = self._get_next_version(clean_title, date)

        return f"{clean_title}__{datetime_str}__v{version:03d}.{self.extension}"

    def _clean_title(self, title: str) -> str:
        """
        Clean title for use in filename

        Args:
            title: Original title (may span several lines)

        Returns:
            Cleaned title, "thumbnail" when nothing usable is left
        """
        title = title.strip()

        # Keep letters/digits (including Thai and CJK), spaces, underscores and hyphens
        title = re.sub(r'[^\w\s-]', '', title)

        # Replace spaces and multiple underscores with single underscore
        title = re.sub(r'[\s_-]+', '_', title).strip('_')

        max_length = 50
        if len(title) > max_length:
            title = title[:max_length]

        return title or "thumbnail"

    def _get_next_version(self, clean_title: str, date: str) -> int:
        """
        Get next available version number

        Args:
            clean_title: Cleaned title
            date: Date string

        Returns:
            Next version number
        """
        pattern = f"{clean_title}__{date}_*__v*.{self.extension}"
        existing_files = list(self.output_dir.glob(pattern))

        versions = []
        for file in existing_files:
            match = re.search(r'__v(\d+)$', file.stem)
            if match:
                versions.append(int(match.group(1)))

        return max(versions) + 1 if versions else 1

    def export(
        self,
        image: np.ndarray,
        title: str,
        version: Optional[int] = None,
        metadata: Optional[dict] = None
    ) -> Path:
        """
        Save thumbnail with proper naming

        Args:
            image: Rendered thumbnail (RGB numpy array)
            title: Thumbnail title
            version: Optional version number
            metadata: Optional metadata to save alongside

        Returns:
            Path to saved file
        """
        filename = self.generate_filename(title, version)
        output_path = self.output_dir / filename

        save_image(image, output_path)
        logger.info(f"Saved thumbnail: {output_path}")

        if metadata:
            self._save_metadata(output_path, metadata)

        return output_path

    def to_png_bytes(self, image: np.ndarray) -> bytes:
        """PNG-encoded thumbnail for direct download"""
        return encode_png(image)

    def _save_metadata(self, thumbnail_path: Path, metadata: dict) -> None:
        """
        Save metadata JSON alongside thumbnail

        Args:
            thumbnail_path: Path to thumbnail
            metadata: Metadata dictionary
        """
        metadata_path = thumbnail_path.with_suffix('.json')

        try:
            with open(metadata_path, 'w', encoding='utf-8') as f:
                json.dump(metadata, f, ensure_ascii=False, indent=2)

            logger.debug(f"Saved metadata: {metadata_path}")

        except OSError as e:
            logger.error(f"Failed to save metadata: {e}")

    def resolve(self, filename: str) -> Optional[Path]:
        """
        Path of an exported file, or None if missing or outside the output dir

        Args:
            filename: Bare filename as returned by export()
        """
        if Path(filename).name != filename:
            return None

        file_path = self.output_dir / filename
        return file_path if file_path.is_file() else None

    def delete(self, filename: str) -> bool:
        """
        Delete an exported thumbnail and its metadata

        Returns:
            True if the thumbnail existed and was deleted
        """
        file_path = self.resolve(filename)
        if file_path is None:
            return False

        file_path.unlink()
        metadata_file = file_path.with_suffix('.json')
        if metadata_file.exists():
            metadata_file.unlink()

        logger.info(f"Deleted thumbnail: {filename}")
        return True

    def list_thumbnails(self) -> list[Path]:
        """
        List all thumbnails in output directory

        Returns:
            List of thumbnail paths, newest first
        """
        pattern = f"*.{self.extension}"
        thumbnails = sorted(self.output_dir.glob(pattern), key=lambda p: p.stat().st_mtime, reverse=True)

        logger.info(f"Found {len(thumbnails)} thumbnails in {self.output_dir}")

        return thumbnails

    def cleanup_old_versions(self, title: str, keep_versions: int = 3) -> int:
        """
        Cleanup old versions, keeping only the N most recent

        Args:
            title: Thumbnail title
            keep_versions: Number of versions to keep

        Returns:
            Number of files deleted
        """
        clean_title = self._clean_title(title)
        pattern = f"{clean_title}__*__v*.{self.extension}"

        matching = list(self.output_dir.glob(pattern))

        if len(matching) <= keep_versions:
            return 0

        # Newest first; filename timestamps break mtime ties
        matching.sort(key=lambda p: (p.stat().st_mtime, p.name), reverse=True)

        deleted = 0
        for old_file in matching[keep_versions:]:
            try:
                old_file.unlink()
                logger.debug(f"Deleted old version: {old_file}")

                metadata_file = old_file.with_suffix('.json')
                if metadata_file.exists():
                    metadata_file.unlink()

                deleted += 1

            except OSError as e:
                logger.error(f"Failed to delete {old_file}: {e}")

        logger.info(f"Cleaned up {deleted} old versions")

        return deleted
