"""API route registrations."""
