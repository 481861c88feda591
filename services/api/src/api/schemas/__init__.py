"""
Request and response schemas for the DKA audit API.
"""
