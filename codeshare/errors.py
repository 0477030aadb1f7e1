# Error taxonomy
# Execution failures are reported as ExecutionResult values and structural
# no-ops as boolean returns; only a missing room is raised.


class RoomNotFound(LookupError):
    """Operation referenced a room that does not exist"""

    def __init__(self, room_id: str):
        super().__init__(f"Room {room_id} not found")
        self.room_id = room_id
