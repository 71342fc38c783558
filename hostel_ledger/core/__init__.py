"""
Core infrastructure: database, logging, exceptions, middleware and security.
"""
