"""tests.unit.classification package

Unit suites for the sensitivity engine: encoder, dataset generator, trainer,
model state, inference, fallback and the orchestrator.
"""
