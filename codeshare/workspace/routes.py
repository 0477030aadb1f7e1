# API routes for rooms

from flask import Blueprint, jsonify

from .registry import RoomRegistry
from ..serializers import room_to_dict


def create_rooms_blueprint(registry: RoomRegistry):
    """Create and configure the Flask blueprint for room management"""
    bp = Blueprint('rooms', __name__)

    @bp.route('/api/rooms/create', methods=['POST'])
    def create_room():
        """Create a new room with a seeded workspace"""
        room = registry.create()
        return jsonify({
            'roomId': room.id,
            'message': 'Room created successfully'
        }), 201

    @bp.route('/api/rooms/<room_id>', methods=['GET'])
    def get_room(room_id: str):
        """
        Check whether a room exists

        Used by clients to validate a room ID before joining.
        """
        with registry.locked(room_id) as room:
            if room is None:
                return jsonify({'exists': False, 'message': 'Room not found'}), 404
            return jsonify({'exists': True, 'room': room_to_dict(room)})

    return bp
