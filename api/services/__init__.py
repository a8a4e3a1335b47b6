"""
Use cases that need more than a single storage call.

Services receive the Storage instance built at startup; routers call them
instead of hashing passwords or checking usernames themselves.
"""
