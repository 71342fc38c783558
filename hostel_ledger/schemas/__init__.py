"""
Request and response schemas (pydantic v2).
"""
