"""HTTP surface of the booking core."""
