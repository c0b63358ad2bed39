"""
Core building blocks shared by the server: logging, errors, persistence and search.
"""
