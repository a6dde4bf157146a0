# content_scout/crawler/__init__.py
"""Concurrent website crawl: fetch client, URL discovery and scheduler."""
