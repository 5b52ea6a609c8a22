"""
Unit Tests Package for the Parking Ledger

Domain value objects, pricing, aggregates, repositories, the event bus,
configuration and the application service, each tested in isolation.
"""
