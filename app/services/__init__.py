"""
Services layer for the X Post Generator.
"""
