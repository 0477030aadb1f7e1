# Main Flask application for the codeshare backend

from dataclasses import dataclass

from flask import Flask, jsonify
from flask_cors import CORS
from flask_socketio import SocketIO

from . import config as settings
from .execution.catalog import LanguageCatalog
from .execution.orchestrator import ExecutionOrchestrator
from .execution.routes import create_execution_blueprint
from .execution.service import CodeRunService
from .realtime.gateway import BroadcastGateway
from .realtime.service import RealtimeService
from .realtime.socket_transport import SocketIOChannel, register_socket_handlers
from .workspace.registry import RoomRegistry
from .workspace.routes import create_rooms_blueprint


@dataclass
class CodeshareServices:
    """Per-app object graph; nothing here is module-global"""
    registry: RoomRegistry
    catalog: LanguageCatalog
    gateway: BroadcastGateway
    realtime: RealtimeService
    runner: CodeRunService
    socketio: SocketIO


def create_app(config=None):
    """Create and configure the Flask application"""
    app = Flask(__name__)

    # Load configuration if provided
    if config:
        app.config.update(config)

    origins = app.config.get('CORS_ORIGINS', settings.CORS_ORIGINS)
    CORS(app, origins=origins, supports_credentials=True)
    # Each connection's events are handled one at a time, in arrival order
    socketio = SocketIO(app, cors_allowed_origins=origins, async_handlers=False)

    registry = RoomRegistry()
    catalog = app.config.get('LANGUAGE_CATALOG') or LanguageCatalog()
    gateway = BroadcastGateway(registry, SocketIOChannel(socketio))
    orchestrator = ExecutionOrchestrator(
        catalog,
        temp_dir=app.config.get('EXECUTION_TEMP_DIR', settings.EXECUTION_TEMP_DIR),
    )
    services = CodeshareServices(
        registry=registry,
        catalog=catalog,
        gateway=gateway,
        realtime=RealtimeService(registry, gateway),
        runner=CodeRunService(registry, catalog, orchestrator, gateway),
        socketio=socketio,
    )
    app.extensions['codeshare'] = services

    # Real-time events
    register_socket_handlers(socketio, services.realtime)

    # HTTP routes
    app.register_blueprint(create_rooms_blueprint(registry))
    app.register_blueprint(create_execution_blueprint(catalog, services.runner))

    @app.route('/api/health', methods=['GET'])
    def health():
        return jsonify({'status': 'ok'})

    return app

