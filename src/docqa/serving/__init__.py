"""
Serving — REST interface for ingestion and question answering.

Run locally with ``uvicorn docqa.serving.app:app``.
"""
