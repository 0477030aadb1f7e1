"""Child process driver used by the execution orchestrator."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from typing import Sequence

from .models import ProcessOutcome

logger = logging.getLogger(__name__)


def run_process(
    command: Sequence[str],
    cwd: str,
    deadline: float,
) -> ProcessOutcome:
    """Run ``command`` to completion or until the monotonic ``deadline``.

    Blocks the calling thread only. Both output streams are drained fully;
    the call returns once they are closed and the process has exited.

    On deadline expiry the child's whole process group is killed, so nothing
    it spawned outlives the call. Output captured up to that point is kept.

    Raises:
        OSError: if the process cannot be started (missing executable,
            permission denied, ...).
    """
    process = subprocess.Popen(
        list(command),
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        encoding="utf-8",
        errors="replace",
        start_new_session=True,
    )
    remaining = max(deadline - time.monotonic(), 0)
    try:
        stdout, stderr = process.communicate(timeout=remaining)
    except subprocess.TimeoutExpired:
        _kill_process_tree(process)
        stdout, stderr = process.communicate()
        return ProcessOutcome(
            stdout=stdout or "",
            stderr=stderr or "",
            exit_code=process.returncode,
            timed_out=True,
        )
    except BaseException:
        _kill_process_tree(process)
        process.wait()
        raise
    return ProcessOutcome(stdout=stdout, stderr=stderr, exit_code=process.returncode)


def _kill_process_tree(process: subprocess.Popen) -> None:
    if hasattr(os, "killpg"):
        try:
            os.killpg(process.pid, signal.SIGKILL)
            return
        except ProcessLookupError:
            return
        except PermissionError:
            logger.warning("Could not kill process group %s; killing leader only", process.pid)
    process.kill()
