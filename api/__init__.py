"""
API module - HTTP surface of the service.
"""
