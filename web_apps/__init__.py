"""
JSON API over the dictionary lookup client.

``lookup_web_app`` builds the FastAPI application (``create_app``) and runs it
under uvicorn (``run_server``); the CLI's ``serve`` command uses the latter.
"""

__all__ = []
