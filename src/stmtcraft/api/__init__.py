"""REST API for rendering statements described as JSON."""
