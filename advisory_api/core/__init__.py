"""Configuration, exceptions, pagination and response envelopes."""
