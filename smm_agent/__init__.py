"""
Command line agent built on smm_asset.
"""
