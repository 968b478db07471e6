"""
# payloadsmith Core Library

This package contains the template scanner, the instruction tables, payload
assembly and the supporting infrastructure (configuration, logging, serial
transport) that the CLI depends on.
"""
