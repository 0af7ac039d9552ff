"""Domain applications of the rental booking core."""
