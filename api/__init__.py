"""HTTP API for image conversion and keyword search."""
