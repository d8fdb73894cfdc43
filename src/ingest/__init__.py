"""Transcript ingestion and run orchestration.

This package streams Xenium transcript tables into typed rows and
drives them through the filter into the output writer.
"""
