"""Credential source value object."""

from enum import StrEnum


class CredentialSource(StrEnum):
    """Directory collection a credential was read from."""

    SERVICE_PRINCIPAL = "servicePrincipal"
    APPLICATION = "application"

    def __str__(self) -> str:
        return self.value
