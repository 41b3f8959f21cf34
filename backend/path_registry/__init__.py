"""Path Registry — access-controlled registry of versioned learning paths."""
