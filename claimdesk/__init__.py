"""ClaimDesk: role-based insurance claims management."""

__version__ = "1.0.0"
