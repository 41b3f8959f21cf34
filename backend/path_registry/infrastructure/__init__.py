"""Infrastructure Layer — logging and database adapters for the registry shell."""
