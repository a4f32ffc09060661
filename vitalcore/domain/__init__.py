"""Domain models and errors for lab results and trends."""
