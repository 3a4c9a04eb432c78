"""Service layer.

- ``filmauth.services.auth``: token session lifecycle (:class:`SessionManager`)
  and expiry cleanup (:class:`TokenCleanupService`).
- ``filmauth.services.account``: account operations that trigger revocation.
- ``filmauth.services._shared``: base service, ports and domain errors.
"""
