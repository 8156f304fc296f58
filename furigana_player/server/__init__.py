"""HTTP API for driving the subtitle player from a browser or tool."""
