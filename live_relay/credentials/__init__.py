from .provider import CredentialProvider

__all__ = ["CredentialProvider"]
