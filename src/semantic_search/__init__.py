"""
semantic_search - semantic document search over PostgreSQL + pgvector.

Documents are stored with an embedding of their title and content;
queries are embedded with the same provider and ranked by cosine
similarity. See ``semantic_search.search.open_search_service`` for the
usual entry point.
"""

__version__ = "0.1.0"
