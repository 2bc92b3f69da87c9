"""Showtime filtering and lifecycle core for the cinema admin frontend."""
