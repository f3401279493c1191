"""Classification, decoding, scheduling and verification services."""
