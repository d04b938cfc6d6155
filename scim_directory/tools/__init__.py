"""
Operator tooling for SCIM Directory: database seeding and a mock identity
provider client for smoke testing.
"""
