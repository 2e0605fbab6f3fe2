"""Configuration and shared helpers used across querybench services."""
