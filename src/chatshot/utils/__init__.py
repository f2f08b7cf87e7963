"""Small helpers shared by the transport and the CLI."""
