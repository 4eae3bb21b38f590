"""Versioned table store layer.

This package resolves destination tables and write modes and persists
datasets as versioned Lance tables. It also answers table queries.
"""
