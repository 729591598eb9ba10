"""
Operations Layer

Pure, synchronous domain logic built once from static reference data and
shared read-only by the services:
- WeaponEquivalenceIndex: reskin to canonical weapon mapping
- WeaponCatalog: weapon attributes, classification values and universes
"""
