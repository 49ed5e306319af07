"""Authentication and authorization.

Learn: Users → email/password → bcrypt verify → JWT (7 days by default).
Every task route resolves the JWT to a CurrentIdentity, and the task
service scopes all reads and writes to that identity's user id.
"""
