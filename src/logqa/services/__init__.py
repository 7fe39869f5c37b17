"""MongoDB access and structured queries."""
