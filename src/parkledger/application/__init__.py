"""Application layer: configuration, DTOs, the parking service and commands"""
