"""
Core infrastructure: settings, structured logging and HTTP middleware.
"""
