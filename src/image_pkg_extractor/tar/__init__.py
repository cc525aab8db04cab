"""Streaming access to saved image archives."""
