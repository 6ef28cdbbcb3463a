"""listings/ -- Mock property catalogue for PeanechEstate.

Layer rule: listings/ does NOT import from api/ or auth/. Mutations arrive
here only after an api/ route has passed its role gate.
"""
