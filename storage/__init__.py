"""storage/ -- Durable key-value storage for PeanechEstate.

Layer rule: storage/ imports only stdlib + third-party libraries.
auth/ depends on storage/ through the LocalStorage interface, never the reverse.
"""
