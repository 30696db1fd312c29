"""Contact form submissions."""
