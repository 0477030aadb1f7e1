# Code run service - room check, language resolution, orchestration and broadcast

import logging

from .catalog import LanguageCatalog
from .models import ExecutionRequest, ExecutionResult
from .orchestrator import ExecutionOrchestrator
from ..errors import RoomNotFound
from ..realtime import events
from ..realtime.gateway import BroadcastGateway
from ..serializers import result_to_dict
from ..workspace.registry import RoomRegistry

logger = logging.getLogger(__name__)


class CodeRunService:
    """
    Entry point for run requests

    No room lock is held while the program runs: execution never touches a
    workspace tree, so runs proceed in parallel with edits and with each other.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        catalog: LanguageCatalog,
        orchestrator: ExecutionOrchestrator,
        gateway: BroadcastGateway,
    ):
        self.registry = registry
        self.catalog = catalog
        self.orchestrator = orchestrator
        self.gateway = gateway

    def execute(self, request: ExecutionRequest) -> ExecutionResult:
        """
        Run a request's code and broadcast the result to the whole room

        Raises:
            RoomNotFound: if the request's room does not exist
        """
        if self.registry.get(request.room_id) is None:
            raise RoomNotFound(request.room_id)

        language = self.catalog.resolve_language(request.language, request.filename)
        result = self.orchestrator.execute(request.code, language)
        logger.info(
            "Run in room %s finished: language=%s status=%s exit=%s (%d ms)",
            request.room_id, result.language, result.status.value,
            result.exit_code, result.duration_ms,
        )
        self.gateway.to_room(request.room_id, events.EXECUTION_COMPLETED, result_to_dict(result))
        return result
