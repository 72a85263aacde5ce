"""Shared utilities for Snipe"""
