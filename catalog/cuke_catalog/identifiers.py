"""Canonical report identifiers and the rename that enforces them."""

from __future__ import annotations

import logging
import re

from .errors import FilenameCollision
from .models import ReportMetadata
from .storage import ReportStore

logger = logging.getLogger(__name__)


def assign_identifier(store: ReportStore, meta: ReportMetadata, current_filename: str) -> str | None:
    """Move a blob to its suggested filename and update ``meta.id`` to match.

    Returns the new filename, or None when the blob is already canonical.

    Raises:
        FilenameCollision: another blob already holds the suggested name; the
            blob keeps its current name and ``meta`` is left unchanged.
    """
    target = meta.suggestedFilename
    if not target or target == current_filename:
        return None
    if not store.is_report_name(target):
        logger.warning("Not renaming %s: %s is reserved for catalog files", current_filename, target)
        return None
    try:
        store.rename_no_clobber(current_filename, target)
    except FilenameCollision:
        logger.warning("Not renaming %s: %s already exists", current_filename, target)
        raise
    meta.id = re.sub(r"\.json$", "", target)
    return target
