"""
Process tree termination.

Only used when a caller explicitly asks to stop what it started; nothing in
the run or compile paths terminates processes on its own.
"""

import logging
import signal
from typing import List

import psutil

logger = logging.getLogger(__name__)

# (signal name, uses kill()) in escalation order
_PHASES = [
    ("SIGTERM", False),
    ("SIGKILL", True),
]


def _is_process_alive(process: psutil.Process) -> bool:
    """Safely check if a process is still alive and not a zombie."""
    try:
        if not process.is_running():
            return False
        return process.status() not in (psutil.STATUS_ZOMBIE, psutil.STATUS_DEAD)
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return False


def _get_process_children(parent: psutil.Process) -> List[psutil.Process]:
    """All live descendants, tolerating processes exiting mid-enumeration."""
    try:
        return [child for child in parent.children(recursive=True) if _is_process_alive(child)]
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        return []


def terminate_process_tree(pid: int, name: str, timeout: float = 3.0) -> bool:
    """
    Terminate a process and all its descendants, escalating SIGTERM to SIGKILL.

    Args:
        pid: Root process id
        name: Label used in log messages
        timeout: Seconds to wait after each phase

    Returns:
        True if nothing from the tree is left alive
    """
    if pid <= 0:
        logger.warning(f"Invalid PID {pid} for {name}, skipping termination")
        return True

    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        logger.debug(f"Process {name} (PID: {pid}) already terminated")
        return True

    logger.info(f"Terminating {name} (PID: {pid}) and its process tree")

    remaining: List[psutil.Process] = []
    for signal_name, force in _PHASES:
        targets = [p for p in [parent] + _get_process_children(parent) if _is_process_alive(p)]
        if not targets:
            return True

        for process in targets:
            try:
                if force:
                    process.kill()
                else:
                    process.send_signal(signal.SIGTERM)
                logger.debug(f"Sent {signal_name} to PID {process.pid}")
            except psutil.NoSuchProcess:
                continue
            except psutil.AccessDenied:
                logger.warning(f"Access denied sending {signal_name} to PID {process.pid}")

        _, still_alive = psutil.wait_procs(targets, timeout=timeout)
        remaining = [p for p in still_alive if _is_process_alive(p)]
        if not remaining:
            logger.info(f"{name} terminated after {signal_name}")
            return True
        logger.warning(f"{len(remaining)} processes of {name} still alive after {signal_name}")

    logger.error(f"Failed to terminate {len(remaining)} processes for {name}")
    return False
