"""
Core module for GamerBot

Contains configuration management, logging setup and the IRC transport.
"""
