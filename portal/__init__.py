"""Backend package: store, validation, pipelines, API.

This package wires duplicate detection and PDF order prefill into the
product, manufacturer and order endpoints of the purchase portal.
"""
