"""
Concurrent multi-city listing scraping: orchestrator, per-unit pipeline,
automation sessions and result sinks.
"""
