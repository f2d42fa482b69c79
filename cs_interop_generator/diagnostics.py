"""
Collection of non-fatal problems found during a generation run
"""

import logging

logger = logging.getLogger(__name__)


class Diagnostics:
    """Ordered, de-duplicated list of warnings for one run"""

    def __init__(self):
        self.warnings: list[str] = []
        self._seen = set()

    def warn(self, message: str):
        if message in self._seen:
            return
        self._seen.add(message)
        self.warnings.append(message)
        logger.warning(message)

    def __len__(self):
        return len(self.warnings)

    def __iter__(self):
        return iter(self.warnings)
