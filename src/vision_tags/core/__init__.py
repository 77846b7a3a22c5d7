"""Core data types and guards for vision tag recovery."""
