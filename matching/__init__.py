"""Text matching: positional fuzzy similarity and ordered keyword tables."""
