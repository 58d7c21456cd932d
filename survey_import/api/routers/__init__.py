"""
FastAPI routers for organizing API endpoints.

This package contains the survey import routers mounted by main.py.
"""
