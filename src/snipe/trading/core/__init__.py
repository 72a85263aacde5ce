"""Core configuration and bot facade"""
