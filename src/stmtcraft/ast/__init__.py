"""Statement and condition trees rendered through a dialect into a buffer."""
