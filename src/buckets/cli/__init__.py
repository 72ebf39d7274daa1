"""
Command Line Interface Package

Command Structure:
- buckets: Main entry point with utility commands (version, config)
- buckets handle-event: run the engine on one event payload
- buckets validate-percentages / reconcile / cleanup: maintenance operations
"""
