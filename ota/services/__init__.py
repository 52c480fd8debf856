"""Services orchestrating API, project and git access for CLI commands."""
