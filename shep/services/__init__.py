"""Services used by the shep commands."""
