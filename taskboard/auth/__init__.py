"""Session verification and request authorization."""
