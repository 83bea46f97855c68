"""
Shared Kernel

Building blocks used by every TripoStay app: domain primitives and
errors, the unit of work and message bus, and infrastructure helpers
(encryption, pagination, API error rendering).
"""
