# Execution orchestrator - drives the compile/run/cleanup sequence for one request

import logging
import shutil
import tempfile
import time
import uuid
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .catalog import LanguageCatalog, detect_entry_class
from .models import (
    ExecutionMode, ExecutionResult, ExecutionStatus, LanguageSpec, ProcessOutcome
)
from .runner import run_process

logger = logging.getLogger(__name__)

DEFAULT_ENTRY_CLASS = "Main"
NO_EXIT_CODE = -1


class ScratchSpace:
    """
    Private scratch directory for one execution request

    Every artifact is recorded as it is created and removed on exit, whatever
    the outcome. Cleanup failures are logged, never raised.
    """

    def __init__(self, parent_dir: Optional[str] = None):
        self.token = f"{time.time_ns()}{uuid.uuid4().hex[:6]}"
        self.parent_dir = parent_dir
        self.root: Optional[Path] = None
        self.artifacts: List[Path] = []

    def __enter__(self) -> "ScratchSpace":
        self.root = Path(tempfile.mkdtemp(prefix=f"codeshare-{self.token}-", dir=self.parent_dir))
        return self

    def __exit__(self, *exc_info) -> None:
        self.cleanup()

    def write(self, filename: str, content: str) -> Path:
        target = self.root / filename
        self.artifacts.append(target)
        target.write_text(content, encoding="utf-8")
        return target

    def reserve(self, filename: str) -> Path:
        """Record an artifact a child process is expected to create"""
        target = self.root / filename
        self.artifacts.append(target)
        return target

    def cleanup(self) -> None:
        if self.root is None:
            return
        for artifact in self.artifacts:
            try:
                artifact.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Cleanup error for %s: %s", artifact, exc)
        try:
            shutil.rmtree(self.root)
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Cleanup error for %s: %s", self.root, exc)
        self.root = None


class ExecutionOrchestrator:
    """
    Runs source code in one of the catalog's languages

    State machine per request:
        interpret:        received -> running -> completed
        compile-then-run: received -> compiling -> running -> completed
                                      compiling -> compile-failed
        any active phase past the deadline -> timed-out

    ``execute`` never raises; every failure comes back as an
    ``ExecutionResult`` with ``error`` set.
    """

    def __init__(self, catalog: LanguageCatalog, temp_dir: Optional[str] = None):
        self.catalog = catalog
        self.temp_dir = temp_dir

    def execute(self, code: str, language: str) -> ExecutionResult:
        started = time.monotonic()
        spec = self.catalog.get(language)
        if spec is None:
            supported = ", ".join(self.catalog.ids())
            return ExecutionResult(
                output=f"Unsupported language: {language}. Supported languages: {supported}",
                exit_code=NO_EXIT_CODE,
                error=True,
                language=language,
                status=ExecutionStatus.UNSUPPORTED_LANGUAGE,
            )

        deadline = started + spec.timeout_s
        try:
            result = self._run_pipeline(spec, code, deadline)
        except Exception as exc:
            logger.exception("Unexpected failure executing %s code", spec.id)
            result = ExecutionResult(
                output=f"Execution error: {exc}",
                exit_code=NO_EXIT_CODE,
                error=True,
                language=spec.id,
                status=ExecutionStatus.INTERNAL_ERROR,
            )
        duration_ms = int((time.monotonic() - started) * 1000)
        return replace(result, duration_ms=duration_ms)

    def _run_pipeline(self, spec: LanguageSpec, code: str, deadline: float) -> ExecutionResult:
        with ScratchSpace(self.temp_dir) as scratch:
            if spec.class_based:
                entry = detect_entry_class(code) or DEFAULT_ENTRY_CLASS
                source = scratch.write(f"{entry}{spec.source_extension}", code)
                scratch.reserve(f"{entry}.class")
            else:
                entry = ""
                source = scratch.write(f"source{scratch.token}{spec.source_extension}", code)
            executable = scratch.root / f"program{scratch.token}"
            values = {
                "source": str(source),
                "executable": str(executable),
                "workdir": str(scratch.root),
                "entry": entry,
            }

            if spec.mode is ExecutionMode.COMPILE_THEN_RUN:
                scratch.reserve(executable.name)
                compiled = self._launch(spec, spec.compile_command, values, scratch, deadline)
                if isinstance(compiled, ExecutionResult):
                    return compiled
                if compiled.timed_out:
                    return self._timed_out(spec, compiled)
                if compiled.exit_code != 0:
                    diagnostics = compiled.stderr or compiled.stdout
                    return ExecutionResult(
                        output=f"Compilation failed:\n{diagnostics}",
                        exit_code=compiled.exit_code,
                        error=True,
                        language=spec.id,
                        status=ExecutionStatus.COMPILE_FAILED,
                    )
                if time.monotonic() >= deadline:
                    return self._timed_out(spec, compiled)

            ran = self._launch(spec, spec.run_command, values, scratch, deadline)
            if isinstance(ran, ExecutionResult):
                return ran
            if ran.timed_out:
                return self._timed_out(spec, ran)
            return ExecutionResult(
                output=combine_output(ran.stdout, ran.stderr),
                exit_code=ran.exit_code,
                error=ran.exit_code != 0,
                language=spec.id,
                status=ExecutionStatus.COMPLETED,
            )

    def _launch(self, spec, template, values, scratch, deadline):
        command = [arg.format(**values) for arg in template]
        try:
            return run_process(command, cwd=str(scratch.root), deadline=deadline)
        except OSError as exc:
            logger.warning("Could not launch %s: %s", command[0], exc)
            return ExecutionResult(
                output=f"Execution error: {exc}",
                exit_code=NO_EXIT_CODE,
                error=True,
                language=spec.id,
                status=ExecutionStatus.LAUNCH_FAILED,
            )

    @staticmethod
    def _timed_out(spec: LanguageSpec, outcome: ProcessOutcome) -> ExecutionResult:
        partial = combine_output(outcome.stdout, outcome.stderr)
        return ExecutionResult(
            output=f"{partial}\n[Execution timed out after {spec.timeout_s:g} seconds]",
            exit_code=outcome.exit_code,
            error=True,
            language=spec.id,
            status=ExecutionStatus.TIMED_OUT,
        )


def combine_output(stdout: str, stderr: str) -> str:
    """stdout first, then stderr behind an ``Error:`` separator if non-empty"""
    if not stderr:
        return stdout
    return f"{stdout}\nError: {stderr}"
