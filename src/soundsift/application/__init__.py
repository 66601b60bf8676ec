"""Application layer: the duplicate detection and resolution services."""
