"""HTTP API for Report Builder."""
