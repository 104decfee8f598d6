"""Cross-domain building blocks."""
