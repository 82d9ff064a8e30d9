"""
Serving — FastAPI application for the document question-answering service.

Run locally with ``python -m document_rag.serving.app``.
"""
