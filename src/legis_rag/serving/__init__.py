"""
Serving — FastAPI application for bill ingestion and question answering.

This module exposes the pipeline over HTTP so it can run as a standalone
container behind the bills UI.
"""
