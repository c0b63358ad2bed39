"""
Models shared between the database layer and the HTTP API.
"""
