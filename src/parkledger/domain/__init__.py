"""Domain layer: value objects, entities, aggregates and pricing"""
