"""HTTP front end for city generation."""
