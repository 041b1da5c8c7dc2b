"""
Tile provider test suite

Structure:
- unit/: tests for individual providers, types and the HTTP service
- fakes.py: in-memory providers used as delegates
"""
