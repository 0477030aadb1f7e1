#!/usr/bin/env python3
# Entry point for running the codeshare server

import logging

from codeshare.app import create_app
from codeshare.config import HOST, LOG_LEVEL, PORT

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

logger = logging.getLogger(__name__)


def main():
    """Main entry point"""
    app = create_app()
    socketio = app.extensions['codeshare'].socketio
    logger.info("Server running on port %s", PORT)
    socketio.run(app, host=HOST, port=PORT, allow_unsafe_werkzeug=True)


if __name__ == '__main__':
    main()
