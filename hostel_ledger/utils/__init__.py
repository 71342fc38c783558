"""
Utility helpers: money formatting, email and SMS transport.
"""
