"""
API router package for the DKA audit API.

Contains the FastAPI router modules for episode submission and
amendment, the informational root page, and health checks.
"""
