"""auth/ -- Credentials, session tokens and authorization for ShopAdmin.

Layer rule: auth/ imports only core/ + stdlib + third-party libraries.
It does NOT import from api/ or shop/.
api/ imports from auth/, not the other way around.
"""
