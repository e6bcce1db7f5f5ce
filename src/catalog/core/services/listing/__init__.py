"""Listing query resolution: filters, pagination and the composed listing."""
