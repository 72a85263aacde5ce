"""Application layer: operator commands and their dispatch"""
