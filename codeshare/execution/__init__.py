# Code execution module

from .catalog import LanguageCatalog
from .models import ExecutionMode, ExecutionRequest, ExecutionResult, ExecutionStatus, LanguageSpec
from .orchestrator import ExecutionOrchestrator

__all__ = [
    'ExecutionMode',
    'ExecutionOrchestrator',
    'ExecutionRequest',
    'ExecutionResult',
    'ExecutionStatus',
    'LanguageCatalog',
    'LanguageSpec',
]
