"""Comparison tool base: baseline bookkeeping on the filesystem.

Screenshots are grouped in one folder per browser. Approved (baseline),
build (current) and diff images each live under their own root; when two
roots point at the same directory, role suffixes keep the files apart.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

from taxi.exceptions import ComparisonFailure
from taxi.models.comparison import ComparisonRecord, ComparisonResult
from taxi.models.config import ComparisonConfig
from taxi.utils import filename_safe

if TYPE_CHECKING:
    from taxi.session import Session

logger = logging.getLogger(__name__)


class ComparisonTool:
    """Compares screenshots against approved baselines.

    Subclasses set ``name`` and implement ``run_comparison``.
    """

    name = ""

    def __init__(self, session: Session, config: ComparisonConfig | None = None):
        self.session = session
        self.config = config or session.config.comparison_for(self.name)

    @property
    def approved_path(self) -> Path:
        return self.config.resolved_approved_path()

    @property
    def build_path(self) -> Path:
        return self.config.resolved_build_path()

    @property
    def diff_path(self) -> Path:
        return self.config.resolved_diff_path()

    def folder_name(self) -> str:
        return filename_safe(self.session.browser_id())

    # Suffixes are only needed when several roles share a folder

    def _needs_approved_suffix(self) -> bool:
        approved = self.approved_path.resolve()
        return approved in (self.build_path.resolve(), self.diff_path.resolve())

    def _needs_build_suffix(self) -> bool:
        build = self.build_path.resolve()
        return build in (self.approved_path.resolve(), self.diff_path.resolve())

    def _needs_diff_suffix(self) -> bool:
        diff = self.diff_path.resolve()
        return diff in (self.approved_path.resolve(), self.build_path.resolve())

    def approved_image_path(self, record: ComparisonRecord) -> Path:
        suffix = "_approved" if self._needs_approved_suffix() else ""
        return record.image_path(self.approved_path, self.folder_name(), suffix)

    def build_image_path(self, record: ComparisonRecord) -> Path:
        suffix = "_build" if self._needs_build_suffix() else ""
        return record.image_path(self.build_path, self.folder_name(), suffix)

    def diff_image_path(self, record: ComparisonRecord) -> Path:
        suffix = "_diff" if self._needs_diff_suffix() else ""
        return record.image_path(self.diff_path, self.folder_name(), suffix)

    def prepare_folders(self) -> None:
        for path in (self.approved_path, self.build_path, self.diff_path):
            path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _save_blob(path: Path, blob: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(blob)

    def compare(self, title: str, image: bytes, options: dict[str, Any] | None = None) -> Optional[bool]:
        """Compare ``image`` with the approved baseline for ``title``.

        Returns True or False for a comparison against an existing baseline,
        and None when there was no baseline yet. The current image is always
        written to the build folder. Raises ComparisonFailure on a difference
        when the tool is configured to fail.
        """
        options = dict(options or {})
        record = ComparisonRecord(title=title, id=options.pop("id", None) or 1)

        self.prepare_folders()
        approved_path = self.approved_image_path(record)
        build_path = self.build_image_path(record)
        diff_path = self.diff_image_path(record)

        self._save_blob(build_path, image)

        if not approved_path.exists():
            if self.config.auto_approve:
                self._save_blob(approved_path, image)
                logger.info("Approved new baseline %s", approved_path)
            else:
                logger.info("No baseline for '%s' yet (%s)", title, approved_path)
            return None

        result, output = self.run_comparison(approved_path.read_bytes(), image, {**self.config.options, **options})
        passed = result.passed

        if not passed or self.config.output_on_success:
            self._save_blob(diff_path, output)

        if passed:
            logger.info("Screenshot '%s' matches baseline (%d differences)", title, result.differences)
        else:
            logger.warning("Screenshot '%s' differs from baseline: %d of %d pixels",
                           title, result.differences, result.dimension)
            if self.config.fail_on_difference:
                raise ComparisonFailure(title, result)
        return passed

    def run_comparison(
        self, approved: bytes, current: bytes, options: dict[str, Any]
    ) -> tuple[ComparisonResult, bytes]:
        """Compare two PNG buffers; return the result and a diff image."""
        raise NotImplementedError

    def setup(self) -> None:
        pass

    def tear_down(self) -> None:
        pass
