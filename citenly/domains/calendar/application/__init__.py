"""Calendar application layer."""
