"""Filtered transcript output.

This package names and writes the segmentation-ready CSV.
"""
