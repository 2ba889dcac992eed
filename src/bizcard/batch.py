"""Batch processing for multiple business card images."""

import asyncio
import csv
import io
import json
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from bizcard.models.business_card import DEFAULT_FIELDS
from bizcard.parser import BusinessCardParser
from bizcard.preprocessing import detect_mime_type

logger = logging.getLogger(__name__)

# Column names added to every row; requested fields may not reuse them
RESERVED_COLUMNS = ("image_path", "error")


def _check_fields(fields: Sequence[str] | None) -> list[str]:
    """Return the effective field list, rejecting reserved column names."""
    fields = list(DEFAULT_FIELDS) if fields is None else list(fields)
    clashes = [name for name in fields if name in RESERVED_COLUMNS]
    if clashes:
        raise ValueError(f"Reserved field name(s) in batch request: {', '.join(clashes)}")
    return fields


@dataclass
class BatchResult:
    """Cards extracted from a batch run, plus the images that failed."""

    results: list[dict] = field(default_factory=list)
    errors: list[dict] = field(default_factory=list)
    total_time_ms: float = 0.0

    @property
    def succeeded(self) -> int:
        return len(self.results)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed

    def summary(self) -> dict:
        """Counts and timing for the run."""
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "total_time_ms": self.total_time_ms,
        }


class BatchProcessor:
    """Process multiple business card images with error isolation."""

    # Supported image extensions
    IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".webp", ".gif"}

    def __init__(self, parser: BusinessCardParser, concurrency: int = 4):
        """
        Initialize batch processor.

        Args:
            parser: BusinessCardParser instance for processing individual cards.
            concurrency: Maximum number of requests in flight at once.
        """
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._parser = parser
        self._concurrency = concurrency

    async def process(
        self,
        image_paths: list[Path],
        fields: Sequence[str] | None = None,
    ) -> BatchResult:
        """
        Process multiple images, isolating errors per image.

        Args:
            image_paths: List of image paths to process.
            fields: Field names to request for every image.

        Returns:
            BatchResult with successful results and errors, in input order.

        Raises:
            ValueError: If a field name clashes with a reserved column.
        """
        fields = _check_fields(fields)
        start_time = time.perf_counter()
        semaphore = asyncio.Semaphore(self._concurrency)

        async def run(path: Path) -> tuple[bool, dict]:
            async with semaphore:
                try:
                    card = await self._parser.parse(
                        path, fields, mime_type=detect_mime_type(path)
                    )
                except Exception as e:
                    logger.debug("Failed to process %s: %s", path, e)
                    return False, {"image_path": str(path), "error": str(e)}
            return True, {**card, "image_path": str(path)}

        outcomes = await asyncio.gather(*(run(path) for path in image_paths))

        results = [item for ok, item in outcomes if ok]
        errors = [item for ok, item in outcomes if not ok]

        elapsed_ms = (time.perf_counter() - start_time) * 1000

        return BatchResult(
            results=results,
            errors=errors,
            total_time_ms=round(elapsed_ms, 2),
        )

    def collect_images(self, inputs: list[Path]) -> list[Path]:
        """
        Collect image paths from files and directories.

        Args:
            inputs: List of file paths or directories.

        Returns:
            List of image file paths.
        """
        images: list[Path] = []

        for path in inputs:
            if path.is_dir():
                images.extend(
                    p for p in path.iterdir()
                    if p.is_file() and p.suffix.lower() in self.IMAGE_EXTENSIONS
                )
            elif path.is_file() and path.suffix.lower() in self.IMAGE_EXTENSIONS:
                images.append(path)

        # Sort for deterministic order
        return sorted(set(images))

    def to_json(self, result: BatchResult) -> str:
        """
        Format batch result as JSON.

        Args:
            result: BatchResult to format.

        Returns:
            JSON string with metadata, results, and errors.
        """
        return json.dumps(
            {"metadata": result.summary(), "results": result.results, "errors": result.errors},
            indent=2,
            ensure_ascii=False,
        )

    def to_csv(self, result: BatchResult, fields: Sequence[str] | None = None) -> str:
        """
        Format batch result as CSV.

        Args:
            result: BatchResult to format.
            fields: Field columns, in order. Defaults to DEFAULT_FIELDS.

        Returns:
            CSV string with all results and errors.

        Raises:
            ValueError: If a field name clashes with a reserved column.
        """
        output = io.StringIO()
        fieldnames = ["image_path", *_check_fields(fields), "error"]
        writer = csv.DictWriter(output, fieldnames=fieldnames, extrasaction="ignore")
        writer.writeheader()

        # Write successful results
        for item in result.results:
            row = {k: item.get(k, "") for k in fieldnames}
            row["error"] = ""
            writer.writerow(row)

        # Write errors
        for item in result.errors:
            row = {k: "" for k in fieldnames}
            row["image_path"] = item["image_path"]
            row["error"] = item["error"]
            writer.writerow(row)

        return output.getvalue()
