"""HTTP surface of the gatekeeper."""
