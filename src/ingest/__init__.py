"""Source ingestion layer.

This package resolves source globs, selects a reader per record
boundary, and decodes files into Arrow tables for the store layer.
"""
