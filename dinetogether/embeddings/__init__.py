"""
Embeddings layer for semantic fallback ranking.

Responsibilities:
- Load a lightweight sentence-transformer model on first use.
- Encode a free-text search query and candidate restaurant descriptions.
"""
