"""Service layer.

Each use-case family lives in its own subpackage with a ``service`` module
and a ``dto`` module:

- :mod:`fits.services.credentials` - password policy, hashing, verification.
- :mod:`fits.services.keys` - RSA keypair generation, PSS signing, storage.
- :mod:`fits.services.bootstrap` - one-time creation of the admin identity.
- :mod:`fits.services.invitations` - invitation issue, lookup, redemption.
- :mod:`fits.services.sessions` - login, refresh rotation, logout.

Shared primitives live in :mod:`fits.services._shared`. Nothing is imported
eagerly here: repositories import the shared error types, and eager imports
would close an import cycle.
"""
