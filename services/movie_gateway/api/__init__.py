"""
HTTP endpoints of the movie gateway.
"""
