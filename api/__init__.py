"""HTTP API for the BaatCheet auth core."""
