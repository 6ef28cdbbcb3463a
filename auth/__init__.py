"""auth/ -- Session and authorization package for PeanechEstate.

Layer rule: auth/ imports only stdlib, third-party libraries, core/ and
storage/. It does NOT import from api/ or listings/.
api/ imports from auth/, not the other way around.
"""
