"""
Code shared by the services in this repository.
"""
