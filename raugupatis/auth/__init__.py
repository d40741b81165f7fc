"""
Accounts, password hashing and cookie sessions.
"""
