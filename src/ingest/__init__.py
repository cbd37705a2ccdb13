"""Acquisition and run orchestration.

This package renders the upstream page, reads its raw table grid, and
drives each run from acquisition through to the store append.
"""
