"""
Bundle discovery.

Resolves which servers to run, either from an explicit list of bundle names
or from the entries of the bundle directory, and maps each to a run request.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence

from ..models.config import BundlesConfig
from ..models.requests import RunParams, RunRequest, Strategy

logger = logging.getLogger(__name__)


class BundleDiscovery:
    """
    Maps bundle names to server run requests.

    Hot servers run through the watcher wrapper with the built artifact as
    its only argument. Plain servers run the artifact as a background child
    so the parent keeps control of it.
    """

    def __init__(self, config: Optional[BundlesConfig] = None, cwd: Optional[Path] = None):
        self.config = config or BundlesConfig()
        self.cwd = cwd

    @property
    def bundles_dir(self) -> Path:
        return (self.cwd or Path.cwd()) / self.config.directory

    def discover(self) -> List[str]:
        """
        List bundle names from the bundle directory.

        Entries come back in filesystem listing order, unsorted.

        Raises:
            OSError: Whatever listing the directory raises, unwrapped
        """
        names = os.listdir(self.bundles_dir)
        logger.debug(f"Discovered {len(names)} bundles in {self.bundles_dir}: {names}")
        return names

    def server_request(self, name: str, hot: bool = False) -> RunRequest:
        artifact = self.config.artifact_path(name)
        if hot:
            return RunRequest(self.config.hot_wrapper, RunParams(args=(artifact,)))
        return RunRequest(artifact, RunParams(strategy=Strategy.BACKGROUND))

    def get_servers(self, bundles: Optional[Sequence[str]] = None, hot: bool = False) -> List[RunRequest]:
        """
        Run requests for the given bundles, or for every discovered bundle.

        Args:
            bundles: Explicit bundle names; None lists the bundle directory
            hot: Run through the hot-reload wrapper

        Returns:
            One RunRequest per bundle, in bundle order
        """
        names = list(bundles) if bundles is not None else self.discover()
        servers = [self.server_request(name, hot=hot) for name in names]
        logger.info(f"Resolved {len(servers)} {'hot ' if hot else ''}servers: {names}")
        return servers
