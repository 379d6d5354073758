"""Authentication and authorization.

Learn: One authentication path. Users sign up or log in with
email/password and receive a signed, time-bounded JWT. Protected routes
resolve the Bearer token to a CurrentIdentity, and every item query is
scoped to that identity's user_id.
"""
