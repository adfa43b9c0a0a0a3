"""Verification state machine for the guild gatekeeper."""
