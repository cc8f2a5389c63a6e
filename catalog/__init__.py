"""Static product catalogue data used by the matchers."""
