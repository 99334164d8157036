"""OpenAuth - identity provider registry for OAuth2 issuers."""

__version__ = "0.1.0"
