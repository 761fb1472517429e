"""Authentication and authorization.

Learn: one authentication path:
    email/password → AuthService.authenticate → TokenService.issue → JWT

Every protected request carries the raw JWT in the token header
(Authorization by default). The Request Gate (dependencies.py) verifies
it and resolves a CurrentIdentity that handlers use to scope queries by
owner_id.
"""
