"""Metadata synthesis and validation for image embedding."""
