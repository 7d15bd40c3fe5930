"""
Errors, types and contracts shared by every layer of the client.
"""
