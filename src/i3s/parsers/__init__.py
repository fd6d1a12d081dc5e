"""Decoding stages of an I3S node payload."""
