"""HTTP API for template publication and agent upgrades.

Usage:
    uvicorn ams.api.app:app
"""
