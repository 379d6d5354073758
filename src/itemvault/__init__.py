"""ItemVault — multi-tenant item store with stateless bearer-token auth.

Users sign up and log in to receive a signed JWT. Every item is owned by
exactly one user, and every item query is scoped to the caller's identity.
"""

__version__ = "0.1.0"
