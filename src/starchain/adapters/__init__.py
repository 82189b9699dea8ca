"""
StarChain Adapters

Integrations that run a Registry behind a web framework.
"""
