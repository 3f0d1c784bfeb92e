"""HTTP API for the ResumeForge service.

Routers live in `api.routes`, shared FastAPI dependencies in
`api.dependencies`, and the mapping from application errors to HTTP
responses in `api.errors`.
"""
