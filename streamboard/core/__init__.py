"""Core infrastructure: configuration, logging, errors, shared state"""
