"""Authentication and authorization.

Learn: Three pieces, leaf-first:
1. Credentials → bcrypt password hashes + stateless JWT identity tokens
2. Context → a bearer token resolves to a typed, immutable RequestContext
3. Access → each operation declares an AccessRequirement, evaluated once
   at the top of its handler (role check, ownership-or-role check, or open)
"""
