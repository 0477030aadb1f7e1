# Data models for code execution

from enum import Enum
from dataclasses import dataclass
from typing import Optional, Tuple


class ExecutionMode(Enum):
    """How a language is run"""
    INTERPRET = "interpret"
    COMPILE_THEN_RUN = "compile_then_run"


class ExecutionStatus(Enum):
    """Terminal state of an execution request"""
    COMPLETED = "completed"
    COMPILE_FAILED = "compile_failed"
    TIMED_OUT = "timed_out"
    UNSUPPORTED_LANGUAGE = "unsupported_language"
    LAUNCH_FAILED = "launch_failed"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class LanguageSpec:
    """
    Execution strategy for one language

    Command templates are argument tuples; each argument is formatted with
    ``source``, ``executable``, ``workdir`` and ``entry``.
    """
    id: str
    display_name: str
    extensions: Tuple[str, ...]
    mode: ExecutionMode
    run_command: Tuple[str, ...]
    timeout_s: float
    compile_command: Optional[Tuple[str, ...]] = None
    class_based: bool = False  # Source file must be named after its entry class

    @property
    def source_extension(self) -> str:
        return self.extensions[0] if self.extensions else ""


@dataclass(frozen=True)
class ExecutionRequest:
    code: str
    room_id: str
    language: Optional[str] = None
    filename: Optional[str] = None


@dataclass(frozen=True)
class ProcessOutcome:
    """Captured result of one child process (compile or run phase)"""
    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False


@dataclass(frozen=True)
class ExecutionResult:
    output: str
    exit_code: int  # -1 when no process exited
    error: bool
    language: str
    status: ExecutionStatus = ExecutionStatus.COMPLETED
    duration_ms: int = 0
