"""BaatCheet authentication and session core."""
