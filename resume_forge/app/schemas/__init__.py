"""Request and response schemas for the HTTP API.

All schemas accept and emit camelCase field names, which is what the
front end sends, while Python code uses snake_case attribute names.
"""
