"""
Diagnostics output for build passes.
"""

import logging
from typing import Optional

from ..models.build import DEFAULT_STATS_FORMAT, BuildOutcome, BuildStats
from ..validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


class DiagnosticsReporter:
    """
    Emits engine errors and a readable stats summary.

    Errors go to the error channel, the stats rendering to the info channel,
    always with the fixed DEFAULT_STATS_FORMAT profile (colors on; hash,
    version, chunk and child breakdowns off). Reporting never raises.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def report(self, error: Optional[BaseException], stats: Optional[BuildStats]) -> None:
        if error is not None:
            handle_error(
                error=error,
                context="build engine",
                severity=ErrorSeverity.ERROR,
                reraise=False,
                logger=self.logger,
            )

        if stats is None:
            return

        try:
            rendered = stats.to_string(DEFAULT_STATS_FORMAT)
        except Exception as e:
            handle_error(
                error=e,
                context="rendering build stats",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=self.logger,
            )
            return
        self.logger.info(rendered)

    def report_outcome(self, outcome: BuildOutcome) -> None:
        self.report(outcome.error, outcome.stats)
