"""Java support sources bundled with the generator."""
