"""HTTP surface (Flask blueprints) over the users store."""
