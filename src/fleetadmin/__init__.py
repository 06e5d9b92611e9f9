"""Entra ID group membership and Intune device administration tools."""
