"""FastAPI interface for the bot admin dashboard.

Entry point: python -m src.interfaces.api
"""
