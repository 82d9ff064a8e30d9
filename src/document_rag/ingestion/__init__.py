"""
Ingestion — document loading, chunking, and embedding into the vector store.

Runs once at startup and must finish before the service answers any
question.
"""
