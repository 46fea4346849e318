"""bizdir — business directory API.

Accounts own business listings. Every mutation runs through the same
identity → access check → storage pipeline: tokens resolve to a typed
request context, operations declare an access requirement, and listing
reads are paginated with a stable cursor.
"""

__version__ = "0.1.0"
