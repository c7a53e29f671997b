"""Deriv Signal Server: feed, broadcast and persistence around signal_core."""
