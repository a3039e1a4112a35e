"""
HTTP API for the tool directory.
"""
