"""
Core utilities: error taxonomy shared by transport, clients and pipeline.
"""
