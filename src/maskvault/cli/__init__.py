"""maskvault command line interface."""
