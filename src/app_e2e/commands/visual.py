"""Image snapshot matching for visual regression tests.

Screenshots are captured with Playwright and compared against stored
baselines using Pillow and numpy. A missing baseline is created from the
current screenshot, as in the first run of a new snapshot.
"""

from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Literal

import numpy as np
from PIL import Image

from app_e2e.config import env_flag, get_config
from app_e2e.models import E2EError, ErrorCode, SnapshotResult

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page

logger = logging.getLogger(__name__)

UPDATE_ENV_VAR = "APP_E2E_UPDATE_SNAPSHOTS"
DIFF_DIRNAME = "__diff_output__"
DEFAULT_PIXEL_TOLERANCE = 3

ThresholdType = Literal["pixel", "percent"]


def snapshot_filename(name: str) -> str:
    """Turn a snapshot name into a safe file name.

    Example:
        >>> snapshot_filename("homepage mobile/dark")
        'homepage-mobile-dark.png'
    """
    safe = re.sub(r"[^A-Za-z0-9._-]+", "-", name).strip("-")
    if not safe:
        raise ValueError(f"Invalid snapshot name: {name!r}")
    return f"{safe}.png"


def compare_images(
    baseline: Image.Image,
    actual: Image.Image,
    pixel_tolerance: int = DEFAULT_PIXEL_TOLERANCE,
) -> tuple[int, np.ndarray]:
    """Count pixels that differ between two images of the same size.

    A pixel differs when any RGB channel differs by more than
    pixel_tolerance.

    Returns:
        (number of differing pixels, boolean HxW mask of differences)

    Raises:
        ValueError: If the images have different sizes
    """
    if baseline.size != actual.size:
        raise ValueError(f"Image size mismatch: baseline={baseline.size}, actual={actual.size}")

    baseline_array = np.asarray(baseline.convert("RGB"), dtype=np.int16)
    actual_array = np.asarray(actual.convert("RGB"), dtype=np.int16)
    diff_mask = np.any(np.abs(baseline_array - actual_array) > pixel_tolerance, axis=2)
    return int(diff_mask.sum()), diff_mask


def render_diff(baseline: Image.Image, diff_mask: np.ndarray) -> Image.Image:
    """Fade the baseline and paint differing pixels red."""
    faded = (np.asarray(baseline.convert("RGB"), dtype=np.float32) * 0.3 + 178).astype(np.uint8)
    faded[diff_mask] = (255, 0, 0)
    return Image.fromarray(faded)


class SnapshotMatcher:
    """Compares screenshots against baselines stored on disk.

    Attributes:
        snapshot_dir: Folder holding baseline images
        failure_threshold: Allowed difference (pixels or ratio, per threshold_type)
        threshold_type: "pixel" for an absolute count, "percent" for a 0.0-1.0 ratio
        pixel_tolerance: Per-channel difference ignored when comparing pixels
        update: Overwrite baselines instead of comparing
    """

    def __init__(
        self,
        snapshot_dir: Path,
        *,
        failure_threshold: float = 0.0,
        threshold_type: ThresholdType = "pixel",
        pixel_tolerance: int = DEFAULT_PIXEL_TOLERANCE,
        update: bool = False,
    ) -> None:
        if failure_threshold < 0:
            raise ValueError("failure_threshold must be >= 0")
        if threshold_type == "percent" and failure_threshold > 1:
            raise ValueError("percent failure_threshold must be between 0.0 and 1.0")

        self.snapshot_dir = snapshot_dir
        self.failure_threshold = failure_threshold
        self.threshold_type = threshold_type
        self.pixel_tolerance = pixel_tolerance
        self.update = update

    @property
    def diff_dir(self) -> Path:
        return self.snapshot_dir / DIFF_DIRNAME

    def _passes(self, diff_pixels: int, diff_ratio: float) -> bool:
        if self.threshold_type == "percent":
            return diff_ratio <= self.failure_threshold
        return diff_pixels <= self.failure_threshold

    def compare(self, name: str, screenshot: bytes) -> SnapshotResult:
        """Compare PNG bytes against the baseline called `name`.

        Raises:
            E2EError: With SNAPSHOT_MISMATCH when the difference exceeds
                      the threshold or the sizes differ
        """
        filename = snapshot_filename(name)
        baseline_path = self.snapshot_dir / filename

        if self.update or not baseline_path.exists():
            self.snapshot_dir.mkdir(parents=True, exist_ok=True)
            baseline_path.write_bytes(screenshot)
            logger.info("Wrote baseline snapshot %s", baseline_path)
            return SnapshotResult(name=name, baseline_path=str(baseline_path), baseline_created=True)

        with Image.open(baseline_path) as baseline, Image.open(io.BytesIO(screenshot)) as actual:
            try:
                diff_pixels, diff_mask = compare_images(baseline, actual, self.pixel_tolerance)
            except ValueError as e:
                actual_path = self._write_actual(filename, screenshot)
                raise E2EError(
                    code=ErrorCode.SNAPSHOT_MISMATCH,
                    message=f"Snapshot {name!r}: {e}",
                    details={"baseline": str(baseline_path), "actual": str(actual_path)},
                ) from e

            total = baseline.size[0] * baseline.size[1]
            diff_ratio = diff_pixels / total if total else 0.0
            passed = self._passes(diff_pixels, diff_ratio)

            result = SnapshotResult(
                name=name,
                baseline_path=str(baseline_path),
                diff_pixels=diff_pixels,
                diff_ratio=diff_ratio,
                passed=passed,
            )
            if passed:
                logger.debug("Snapshot %s matched (%d differing pixels)", name, diff_pixels)
                return result

            self.diff_dir.mkdir(parents=True, exist_ok=True)
            diff_path = self.diff_dir / filename.replace(".png", "-diff.png")
            render_diff(baseline, diff_mask).save(diff_path)

        result.actual_path = str(self._write_actual(filename, screenshot))
        result.diff_path = str(diff_path)
        raise E2EError(
            code=ErrorCode.SNAPSHOT_MISMATCH,
            message=(
                f"Snapshot {name!r} differs from baseline by {diff_pixels} pixels "
                f"({diff_ratio:.2%}); see {diff_path}"
            ),
            details=result.model_dump(),
        )

    def _write_actual(self, filename: str, screenshot: bytes) -> Path:
        self.diff_dir.mkdir(parents=True, exist_ok=True)
        path = self.diff_dir / filename.replace(".png", "-actual.png")
        path.write_bytes(screenshot)
        return path

    async def match(self, target: Page | Locator, name: str) -> SnapshotResult:
        """Screenshot a page (viewport) or a locator (element) and compare it."""
        screenshot = await target.screenshot()
        return self.compare(name, screenshot)


def default_matcher() -> SnapshotMatcher:
    """Matcher using the configured snapshot folder and APP_E2E_UPDATE_SNAPSHOTS."""
    update = env_flag(UPDATE_ENV_VAR, False)
    return SnapshotMatcher(get_config().snapshots_folder, update=update)


async def match_image_snapshot(target: Page | Locator, name: str) -> SnapshotResult:
    """Compare a screenshot of `target` with the baseline called `name`."""
    return await default_matcher().match(target, name)
