# Socket.IO transport - maps socket events onto the real-time service

import logging
from typing import Any

from flask import request
from flask_socketio import SocketIO

from . import events
from .service import RealtimeService

logger = logging.getLogger(__name__)


class SocketIOChannel:
    """Channel that emits to a single Socket.IO session ID"""

    def __init__(self, socketio: SocketIO):
        self.socketio = socketio

    def send(self, connection_id: str, event: str, payload: Any) -> None:
        self.socketio.emit(event, payload, to=connection_id)


def register_socket_handlers(socketio: SocketIO, service: RealtimeService) -> None:
    """
    Bind client -> system events to the service; ``request.sid`` is the connection ID

    Text fields that arrive with any other JSON type are treated as missing,
    and events missing a required field are dropped.
    """

    def _fields(data, *names):
        data = data if isinstance(data, dict) else {}
        return [data.get(name) for name in names]

    def _text(value):
        return value if isinstance(value, str) else None

    @socketio.on('connect')
    def on_connect(*_args):
        logger.info("User connected: %s", request.sid)

    @socketio.on(events.JOIN)
    def on_join(data):
        room_id, user_name = _fields(data, 'roomId', 'userName')
        service.join(request.sid, _text(room_id) or '', _text(user_name) or 'Anonymous')

    @socketio.on(events.EDIT_CONTENT)
    def on_edit_content(data):
        file_path, content, room_id = _fields(data, 'filePath', 'content', 'roomId')
        if _text(file_path) is None or _text(content) is None:
            return
        service.edit_content(request.sid, _text(room_id) or '', file_path, content)

    @socketio.on(events.CURSOR_MOVE)
    def on_cursor_move(data):
        position, room_id = _fields(data, 'position', 'roomId')
        service.cursor_move(request.sid, _text(room_id) or '', position)

    @socketio.on(events.CREATE_ENTRY)
    def on_create_entry(data):
        file_path, content, kind, room_id = _fields(data, 'filePath', 'content', 'kind', 'roomId')
        if not _text(file_path):
            return
        if content is not None and _text(content) is None:
            return
        service.create_entry(request.sid, _text(room_id) or '', file_path, content, _text(kind) or 'file')

    @socketio.on(events.DELETE_ENTRY)
    def on_delete_entry(data):
        file_path, room_id = _fields(data, 'filePath', 'roomId')
        if not _text(file_path):
            return
        service.delete_entry(request.sid, _text(room_id) or '', file_path)

    @socketio.on(events.RENAME_ENTRY)
    def on_rename_entry(data):
        old_path, new_path, room_id = _fields(data, 'oldPath', 'newPath', 'roomId')
        if not _text(old_path) or not _text(new_path):
            return
        service.rename_entry(request.sid, _text(room_id) or '', old_path, new_path)

    @socketio.on('disconnect')
    def on_disconnect(*_args):
        logger.info("User disconnected: %s", request.sid)
        service.disconnect(request.sid)
