"""
Server-wide constants.
"""

PROJECT_NAME = "Asset Inventory"
API_V1_STR = "/api/v1"
API_VERSION = "0.1.0"
SCHEMA_VERSION = "v1"

# API key scopes
READ_SCOPE = "read"
WRITE_SCOPE = "write"

ANONYMOUS_ACTOR = "anonymous"
