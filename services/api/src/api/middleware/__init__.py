"""
HTTP middleware for the DKA audit API.
"""
