"""HTTP trigger surface.

This package exposes sync, health, and diagnostic-log endpoints that
drive the pipeline runner on a long-lived event loop.
"""
