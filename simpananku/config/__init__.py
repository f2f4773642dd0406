"""
Configuration for SimpananKu
"""
