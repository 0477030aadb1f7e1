# Configuration for the codeshare server

import os

# Server binding
HOST = os.getenv('HOST', '0.0.0.0')
PORT = int(os.getenv('PORT', '3001'))

# Allowed browser origins for HTTP and Socket.IO
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv('CORS_ORIGINS', 'http://localhost:5173').split(',')
    if origin.strip()
]

# Interpreters used by the built-in language table
PYTHON_COMMAND = os.getenv('PYTHON_COMMAND', 'python3')
NODE_COMMAND = os.getenv('NODE_COMMAND', 'node')

# Parent directory for per-run scratch directories (None = system temp)
EXECUTION_TEMP_DIR = os.getenv('EXECUTION_TEMP_DIR') or None

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
