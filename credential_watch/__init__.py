"""Entra ID Credential Watch - Expiration monitoring for application secrets and certificates."""
