"""Pipelines for text normalization, PDF field extraction, duplicate checks and ingestion.

Each step is callable on its own so request handlers and scripts can share them.
"""
