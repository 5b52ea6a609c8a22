"""
Integration Tests Package for the Parking Ledger

Command lines flowing through the parser, the processor, the service and the
domain, plus the command shell and the console entry point.
"""
