"""
Serving — FastAPI application for the RAG pipeline.

Exposes ingestion, question answering and store statistics over HTTP
for callers that prefer a service to the interactive CLI.
"""
