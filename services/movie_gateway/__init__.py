"""
Douban Movie Gateway.

HTTP gateway exposing movie detail, search and recommendation endpoints
backed by the Douban movie API.
"""
