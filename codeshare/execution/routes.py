# API routes for languages and code execution

from flask import Blueprint, request, jsonify

from .catalog import LanguageCatalog
from .models import ExecutionRequest
from .service import CodeRunService
from ..errors import RoomNotFound
from ..serializers import language_to_dict, result_to_dict


def create_execution_blueprint(catalog: LanguageCatalog, run_service: CodeRunService):
    """Create and configure the Flask blueprint for code execution"""
    bp = Blueprint('execution', __name__)

    def _bad_request(message: str):
        return jsonify({'error': message}), 400

    def _json_body_or_error():
        data = request.get_json(silent=True)
        if not isinstance(data, dict) or not data:
            return None, _bad_request('Invalid JSON body')
        return data, None

    @bp.route('/api/languages', methods=['GET'])
    def list_languages():
        """Get supported languages"""
        return jsonify([language_to_dict(spec) for spec in catalog.languages()])

    @bp.route('/api/execute', methods=['POST'])
    def execute_code():
        """
        Run code for a room and broadcast the result to its members

        Body fields:
        - code: Required source text
        - roomId: Required room ID
        - language: Optional language ID
        - filename: Optional filename; a known extension overrides language
        """
        data, error = _json_body_or_error()
        if error:
            return error

        code = data.get('code')
        room_id = data.get('roomId')
        if not isinstance(code, str):
            return _bad_request('Missing required field: code')
        if not isinstance(room_id, str) or not room_id:
            return _bad_request('Missing required field: roomId')
        for name in ('language', 'filename'):
            if data.get(name) is not None and not isinstance(data[name], str):
                return _bad_request(f'Field {name} must be a string')

        execution_request = ExecutionRequest(
            code=code,
            room_id=room_id,
            language=data.get('language'),
            filename=data.get('filename'),
        )
        try:
            result = run_service.execute(execution_request)
        except RoomNotFound:
            return jsonify({'error': 'Room not found'}), 404
        return jsonify(result_to_dict(result))

    return bp
