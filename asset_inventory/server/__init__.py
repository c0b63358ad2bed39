"""
HTTP server for the asset inventory: FastAPI application, routers and middleware.
"""
