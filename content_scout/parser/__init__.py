# content_scout/parser/__init__.py
"""Parsers for fetched documents (sitemaps, HTML articles)."""
