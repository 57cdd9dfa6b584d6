"""Auth feature package: users, bearer tokens, and the register/login routes.

Tokens are HS256 JWTs whose ``jti`` points at an ``access_tokens`` row, so a
token can be revoked on logout before it expires.
"""
