"""Single-slot store for the most recently displayed table."""

from __future__ import annotations

import logging

from .models import TableDataset

logger = logging.getLogger(__name__)


class DatasetStore:
    """Holds the last dataset passed to ``display_table``.

    Not synchronized: the dispatcher serializes invocations, and ``put`` is a
    single reference swap so readers never see a partial update.
    """

    def __init__(self) -> None:
        self._dataset: TableDataset | None = None

    def put(self, dataset: TableDataset) -> None:
        """Replace the stored dataset."""
        if self._dataset is not None:
            logger.debug("Replacing stored table (%d rows)", len(self._dataset.rows))
        self._dataset = dataset

    def get(self) -> TableDataset | None:
        """Return the stored dataset, or None if nothing was displayed yet."""
        return self._dataset
