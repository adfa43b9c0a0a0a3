"""Discord gateway integration."""
