"""SQLGateway command-line interface."""
