"""User identity lookups."""
