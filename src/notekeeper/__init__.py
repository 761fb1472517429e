"""Notekeeper — personal notes behind a signed-token gate.

A small HTTP service: identities log in with email/password, receive a
short-lived JWT, and use it to manage their own notes, share notes with
other identities, and search identities by username.
"""

__version__ = "0.1.0"
