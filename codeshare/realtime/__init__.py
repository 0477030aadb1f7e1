# Real-time module
