"""
Server configuration, constants and access control.
"""
