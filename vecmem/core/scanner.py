"""
Project scanner.
Walks a source tree and stores each matching file in the memory engine under one group.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import MAX_FILE_BYTES, get_scan_extensions
from .errors import NotInitializedError, VectorMemoryError
from ..util.logging import logger

SKIP_DIRECTORIES = {"node_modules", "__pycache__", "venv", "env", "dist", "build", "out"}


@dataclass
class ScanReport:
    """Outcome of a directory scan."""
    root: str
    group_id: str
    indexed: int = 0
    skipped: int = 0
    failed: int = 0
    paths: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "root": self.root,
            "group_id": self.group_id,
            "indexed": self.indexed,
            "skipped": self.skipped,
            "failed": self.failed,
        }


class ProjectScanner:
    """Indexes source files of a project into a MemoryEngine."""

    def __init__(self, engine, extensions: Optional[List[str]] = None, max_file_bytes: Optional[int] = None):
        self.engine = engine
        exts = extensions if extensions is not None else get_scan_extensions()
        self.extensions = {ext.lstrip(".").lower() for ext in exts}
        self.max_file_bytes = max_file_bytes if max_file_bytes is not None else MAX_FILE_BYTES

    def _iter_files(self, root: Path):
        for dirpath, dirnames, filenames in os.walk(root):
            # Prune in place so os.walk does not descend
            dirnames[:] = sorted(
                d for d in dirnames
                if not d.startswith(".") and d not in SKIP_DIRECTORIES
            )
            for filename in sorted(filenames):
                yield Path(dirpath) / filename

    def scan(self, root, group_id: str = "project") -> ScanReport:
        """
        Store every matching file under root.

        Oversized, undecodable and non-matching files are skipped; a failure
        to store one file is logged and counted without stopping the scan.
        """
        root = Path(root)
        report = ScanReport(root=str(root), group_id=group_id)

        if not self.engine.is_initialized:
            raise NotInitializedError("Memory engine must be initialized before scanning")
        if not root.is_dir():
            raise NotADirectoryError(f"Scan root is not a directory: {root}")

        for path in self._iter_files(root):
            if path.suffix.lstrip(".").lower() not in self.extensions:
                continue

            try:
                if path.stat().st_size > self.max_file_bytes:
                    report.skipped += 1
                    continue
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.debug(f"Skipping unreadable file {path}: {e}")
                report.skipped += 1
                continue

            try:
                self.engine.add_document(
                    path=str(path),
                    content=content,
                    doc_type=path.suffix.lstrip("."),
                    group_id=group_id
                )
            except (VectorMemoryError, ValueError) as e:
                logger.log_vector_operation("scan_file", str(path), {"error": str(e)}, status="failed")
                report.failed += 1
                continue

            report.indexed += 1
            report.paths.append(str(path))

        logger.log_operation("scanner.scan", "success", report.to_dict())
        return report
