"""Authentication primitives: credential store and bearer tokens."""
