"""Calendar infrastructure layer."""
