"""
models/ - Domain dataclasses (User, Hadith) shared by every layer.
"""
