"""Batch linking of raw location strings to canonical reference cities."""
