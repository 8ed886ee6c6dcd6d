"""
Joke retrieval, persistence and read endpoints.
"""
